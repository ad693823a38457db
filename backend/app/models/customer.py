"""SQLAlchemy model definitions for customers."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, String, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_guid


class Customer(Base):
    """Represents a customer placing made-to-order purchases."""

    __tablename__ = "customers"

    id = Column("customer_id", GUID(), primary_key=True, default=new_guid)
    full_name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(40), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    orders = relationship("Order", back_populates="customer")


Index("customers_phone_idx", Customer.phone)

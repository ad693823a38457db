"""SQLAlchemy model definitions for business expenses."""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    String,
    Text,
    func,
)

from ..database import Base
from ..db_types import GUID, new_guid


class Expense(Base):
    """An operating expense. ``amount_minor`` is stored in minor currency units."""

    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount_minor > 0", name="ck_expenses_amount_positive"),
    )

    id = Column("expense_id", GUID(), primary_key=True, default=new_guid)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    amount_minor = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="QAR")
    incurred_at = Column(DateTime, server_default=func.now(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    updated_by = Column(String(100), nullable=True)


Index("expenses_incurred_at_idx", Expense.incurred_at)
Index("expenses_category_idx", Expense.category)

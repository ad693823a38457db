"""SQLAlchemy model definitions for orders and their line items."""

from __future__ import annotations

import enum

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_guid


class OrderStatus(str, enum.Enum):
    """Lifecycle states of an order."""

    PENDING = "pending"
    PAID = "paid"
    IN_PRODUCTION = "in_production"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


REVENUE_STATUSES = (OrderStatus.PAID, OrderStatus.COMPLETED, OrderStatus.SHIPPED)


class OrderSource(str, enum.Enum):
    """Channels an order can come from."""

    SHOPIFY = "shopify"
    WHATSAPP = "whatsapp"
    WEBSITE = "website"
    WALK_IN = "walk_in"


class Order(Base):
    """A customer order. Amounts are stored in minor currency units."""

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total_amount_minor >= 0", name="ck_orders_amount_non_negative"),
        CheckConstraint("total_shipping_minor >= 0", name="ck_orders_shipping_non_negative"),
    )

    id = Column("order_id", GUID(), primary_key=True, default=new_guid)
    order_number = Column(String(50), nullable=True, unique=True)
    customer_id = Column(
        GUID(),
        ForeignKey("customers.customer_id", ondelete="SET NULL"),
        nullable=True,
    )
    status = Column(
        Enum(
            OrderStatus,
            name="order_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    source = Column(String(30), nullable=True)
    currency = Column(String(3), nullable=False, default="QAR")
    total_amount_minor = Column(BigInteger, nullable=False, default=0)
    total_shipping_minor = Column(BigInteger, nullable=False, default=0)
    total_tax_minor = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.created_at",
    )


class OrderItem(Base):
    """A line item of an order; ``unit_cost_minor`` is unknown for many products."""

    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_order_items_quantity_non_negative"),
    )

    id = Column("order_item_id", GUID(), primary_key=True, default=new_guid)
    order_id = Column(
        GUID(),
        ForeignKey("orders.order_id", ondelete="CASCADE"),
        nullable=False,
    )
    product_name = Column(String(255), nullable=True)
    variant_title = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price_minor = Column(BigInteger, nullable=False, default=0)
    unit_cost_minor = Column(BigInteger, nullable=True)
    size = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="items")


Index("orders_status_created_idx", Order.status, Order.created_at)
Index("orders_customer_idx", Order.customer_id)
Index("order_items_order_idx", OrderItem.order_id)

"""Expose SQLAlchemy models for convenient imports."""

from .customer import Customer
from .expense import Expense
from .order import REVENUE_STATUSES, Order, OrderItem, OrderSource, OrderStatus

__all__ = [
    "Customer",
    "Expense",
    "Order",
    "OrderItem",
    "OrderSource",
    "OrderStatus",
    "REVENUE_STATUSES",
]

"""Routers package."""

from .expenses import router as expenses_router
from .finance import router as finance_router

__all__ = [
    "expenses_router",
    "finance_router",
]

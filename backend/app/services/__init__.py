"""Service layer encapsulating business logic for API routers."""

from .expenses import ExpenseService
from .finance import FinanceOverview, FinanceService
from .finance_queries import FinanceDataError, FinanceQueryService
from .periods import PeriodQueryError

__all__ = [
    "ExpenseService",
    "FinanceDataError",
    "FinanceOverview",
    "FinanceQueryService",
    "FinanceService",
    "PeriodQueryError",
]

"""Expose Pydantic schemas for convenient imports."""

from .common import PaginatedResponse
from .expense import ExpenseBase, ExpenseCreate, ExpenseListResponse, ExpenseRead
from .finance import (
    BreakdownResponse,
    BreakdownRowRead,
    ComparisonResponse,
    CustomerRefRead,
    DetailedOrderRead,
    DetailedOrdersResponse,
    FinanceOverviewResponse,
    FinancialComparisonRead,
    FinancialMetricsRead,
    MetricChangesRead,
    MetricsResponse,
    OrderItemRead,
    PeriodRead,
    ReportVariant,
    TimeSeriesPointRead,
    TimeSeriesResponse,
)

__all__ = [
    "PaginatedResponse",
    "ExpenseBase",
    "ExpenseCreate",
    "ExpenseListResponse",
    "ExpenseRead",
    "BreakdownResponse",
    "BreakdownRowRead",
    "ComparisonResponse",
    "CustomerRefRead",
    "DetailedOrderRead",
    "DetailedOrdersResponse",
    "FinanceOverviewResponse",
    "FinancialComparisonRead",
    "FinancialMetricsRead",
    "MetricChangesRead",
    "MetricsResponse",
    "OrderItemRead",
    "PeriodRead",
    "ReportVariant",
    "TimeSeriesPointRead",
    "TimeSeriesResponse",
]

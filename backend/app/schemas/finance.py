"""Response schemas for the financial metrics endpoints.

Monetary fields are integers in minor currency units and ratios are basis
points unless stated otherwise.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..services.finance_types import PeriodKind


class ReportVariant(str, Enum):
    """Full reports keep every row; summary reports keep the top rows per section."""

    FULL = "full"
    SUMMARY = "summary"


class PeriodRead(BaseModel):
    kind: PeriodKind
    start: datetime
    end: datetime
    label: str

    model_config = ConfigDict(from_attributes=True)


class FinancialMetricsRead(BaseModel):
    revenue: int
    cogs: Optional[int] = None
    gross_profit: Optional[int] = None
    expenses: int = Field(..., ge=0)
    net_profit: int
    order_count: int = Field(..., ge=0)
    aov: int

    model_config = ConfigDict(from_attributes=True)


class MetricChangesRead(BaseModel):
    revenue: int
    expenses: int
    net_profit: int
    order_count: int
    aov: int

    model_config = ConfigDict(from_attributes=True)


class FinancialComparisonRead(BaseModel):
    current: FinancialMetricsRead
    previous: FinancialMetricsRead
    changes: MetricChangesRead

    model_config = ConfigDict(from_attributes=True)


class BreakdownRowRead(BaseModel):
    key: str
    amount: int
    percentage_bps: int
    percentage: Decimal = Field(..., description="Share of the total as a percentage")
    count: int = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)


class TimeSeriesPointRead(BaseModel):
    label: str
    date: datetime
    revenue: int
    expenses: int
    gross_profit: Optional[int] = None
    net_profit: int

    model_config = ConfigDict(from_attributes=True)


class MetricsResponse(BaseModel):
    period: PeriodRead
    metrics: FinancialMetricsRead


class ComparisonResponse(BaseModel):
    period: PeriodRead
    previous_period: PeriodRead
    comparison: FinancialComparisonRead


class BreakdownResponse(BaseModel):
    period: PeriodRead
    items: List[BreakdownRowRead]


class TimeSeriesResponse(BaseModel):
    period: PeriodRead
    points: List[TimeSeriesPointRead]


class FinanceOverviewResponse(BaseModel):
    """Full payload consumed by the finance dashboard."""

    period: PeriodRead
    previous_period: PeriodRead
    comparison: FinancialComparisonRead
    revenue_by_source: List[BreakdownRowRead]
    expenses_by_category: List[BreakdownRowRead]
    time_series: List[TimeSeriesPointRead]
    top_products: List[BreakdownRowRead]

    model_config = ConfigDict(from_attributes=True)


class CustomerRefRead(BaseModel):
    id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OrderItemRead(BaseModel):
    product_name: Optional[str] = None
    variant_title: Optional[str] = None
    quantity: Optional[int] = None
    unit_price_minor: Optional[int] = None
    unit_cost_minor: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class DetailedOrderRead(BaseModel):
    id: str
    order_number: Optional[str] = None
    created_at: Optional[datetime] = None
    status: Optional[str] = None
    source: Optional[str] = None
    amount_minor: int = 0
    shipping_minor: int = 0
    total_minor: int = 0
    customer: Optional[CustomerRefRead] = None
    items: List[OrderItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DetailedOrdersResponse(BaseModel):
    period: PeriodRead
    items: List[DetailedOrderRead]

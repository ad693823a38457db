"""Value types shared by the financial metrics and reporting services.

All monetary fields are integers expressed in minor currency units.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Tuple


class PeriodKind(str, enum.Enum):
    """Granularity of a reporting period."""

    DAY = "day"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class Period:
    """Closed interval ``[start, end]`` with a human readable label.

    ``end`` is the last representable instant of the period, one microsecond
    before the start of the following one.
    """

    kind: PeriodKind
    start: datetime
    end: datetime
    label: str

    @property
    def end_exclusive(self) -> datetime:
        return self.end + timedelta(microseconds=1)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class FinancialMetrics:
    revenue: int = 0
    cogs: Optional[int] = None
    gross_profit: Optional[int] = None
    expenses: int = 0
    net_profit: int = 0
    order_count: int = 0
    aov: int = 0


@dataclass(frozen=True)
class MetricChanges:
    """Period-over-period deltas in basis points (100 = 1%)."""

    revenue: int
    expenses: int
    net_profit: int
    order_count: int
    aov: int


@dataclass(frozen=True)
class FinancialComparison:
    current: FinancialMetrics
    previous: FinancialMetrics
    changes: MetricChanges


@dataclass(frozen=True)
class BreakdownRow:
    """One group of a share-of-total breakdown."""

    key: str
    amount: int
    percentage_bps: int
    count: int = 0

    @property
    def percentage(self) -> Decimal:
        return Decimal(self.percentage_bps) / Decimal(100)


RevenueBySource = BreakdownRow
ExpenseByCategory = BreakdownRow


@dataclass(frozen=True)
class TimeSeriesPoint:
    label: str
    date: datetime
    revenue: int
    expenses: int
    gross_profit: Optional[int]
    net_profit: int


@dataclass(frozen=True)
class OrderRow:
    id: str
    amount_minor: Optional[int] = 0
    shipping_minor: Optional[int] = 0
    source: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    customer_id: Optional[str] = None


@dataclass(frozen=True)
class ExpenseRow:
    amount_minor: Optional[int] = 0
    category: Optional[str] = None
    incurred_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderItemRow:
    quantity: Optional[int] = 0
    unit_price_minor: Optional[int] = 0
    unit_cost_minor: Optional[int] = None
    product_name: Optional[str] = None
    variant_title: Optional[str] = None
    order_id: Optional[str] = None


@dataclass(frozen=True)
class CustomerRef:
    id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class DetailedOrder:
    """An order joined with its customer and line items, used by reports."""

    id: str
    order_number: Optional[str] = None
    created_at: Optional[datetime] = None
    status: Optional[str] = None
    source: Optional[str] = None
    amount_minor: Optional[int] = 0
    shipping_minor: Optional[int] = 0
    customer: Optional[CustomerRef] = None
    items: Tuple[OrderItemRow, ...] = field(default_factory=tuple)

    @property
    def total_minor(self) -> int:
        return (self.amount_minor or 0) + (self.shipping_minor or 0)

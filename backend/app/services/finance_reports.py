"""Composition of financial reports into renderer-agnostic sections.

A :class:`FinancialReport` holds five sections (summary, trend, orders,
products and customers). Monetary fields stay in integer minor units; only
the summary rows carry pre-formatted display strings. Renderers in
``report_exports`` decide how the remaining values are displayed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from .breakdowns import DEFAULT_ORDER_SOURCE, group_by_dimension
from .finance_types import (
    DetailedOrder,
    FinancialMetrics,
    OrderItemRow,
    Period,
    TimeSeriesPoint,
)
from .financial_calculations import (
    DEFAULT_CURRENCY,
    format_currency,
    format_ratio_percent,
    ratio_basis_points,
    round_half_up_div,
)

REPORT_TITLE = "Financial Report"
TOTAL_LABEL = "TOTAL"
UNKNOWN_CUSTOMER = "Unknown"
UNKNOWN_PRODUCT = "Unknown Product"
DEFAULT_TOP_N = 5


class ValueUnit(str, enum.Enum):
    CURRENCY = "currency"
    COUNT = "count"
    PERCENT = "percent"


@dataclass(frozen=True)
class SummaryRow:
    metric: str
    value: Optional[int]
    unit: ValueUnit
    display: str


@dataclass(frozen=True)
class SummarySection:
    title: str
    period_label: str
    generated_at: datetime
    rows: Tuple[SummaryRow, ...]

    def row(self, metric: str) -> SummaryRow:
        for candidate in self.rows:
            if candidate.metric == metric:
                return candidate
        raise KeyError(metric)


@dataclass(frozen=True)
class TrendRow:
    label: str
    date: Optional[datetime]
    revenue: int
    expenses: int
    gross_profit: Optional[int]
    net_profit: int
    margin_bps: int


@dataclass(frozen=True)
class TrendSection:
    rows: Tuple[TrendRow, ...]
    total: TrendRow


@dataclass(frozen=True)
class OrderDetailRow:
    order_ref: str
    created_at: Optional[datetime]
    customer_name: Optional[str]
    customer_phone: Optional[str]
    customer_email: Optional[str]
    status: Optional[str]
    source: str
    item_count: int
    subtotal: int
    shipping: int
    total: int


@dataclass(frozen=True)
class OrdersDetailSection:
    """Order rows plus the totals of every order fetched for the period.

    ``full_count`` and ``full_total`` are set when the rows are truncated so
    the overview figures keep describing the whole period.
    """

    rows: Tuple[OrderDetailRow, ...]
    full_count: Optional[int] = None
    full_total: Optional[int] = None

    @property
    def order_count(self) -> int:
        return len(self.rows) if self.full_count is None else self.full_count

    @property
    def grand_total(self) -> int:
        if self.full_total is None:
            return sum(row.total for row in self.rows)
        return self.full_total

    @property
    def average_total(self) -> int:
        if not self.order_count:
            return 0
        return round_half_up_div(self.grand_total, self.order_count)

    def top(self, limit: int) -> "OrdersDetailSection":
        return OrdersDetailSection(
            rows=_top_rows(self.rows, lambda row: row.total, limit),
            full_count=self.order_count,
            full_total=self.grand_total,
        )


@dataclass(frozen=True)
class ProductRow:
    name: str
    quantity: int
    revenue: int


@dataclass(frozen=True)
class ProductBreakdownSection:
    rows: Tuple[ProductRow, ...]
    full_count: Optional[int] = None
    full_quantity: Optional[int] = None

    @property
    def product_count(self) -> int:
        return len(self.rows) if self.full_count is None else self.full_count

    @property
    def total_quantity(self) -> int:
        if self.full_quantity is None:
            return sum(row.quantity for row in self.rows)
        return self.full_quantity

    def top(self, limit: int) -> "ProductBreakdownSection":
        return ProductBreakdownSection(
            rows=tuple(self.rows[: max(limit, 0)]),
            full_count=self.product_count,
            full_quantity=self.total_quantity,
        )


@dataclass(frozen=True)
class CustomerRow:
    name: str
    phone: Optional[str]
    order_count: int
    total_spend: int


@dataclass(frozen=True)
class CustomerBreakdownSection:
    rows: Tuple[CustomerRow, ...]
    full_count: Optional[int] = None

    @property
    def customer_count(self) -> int:
        return len(self.rows) if self.full_count is None else self.full_count

    def top(self, limit: int) -> "CustomerBreakdownSection":
        return CustomerBreakdownSection(
            rows=tuple(self.rows[: max(limit, 0)]),
            full_count=self.customer_count,
        )


@dataclass(frozen=True)
class FinancialReport:
    period: Period
    currency: str
    summary: SummarySection
    trend: TrendSection
    orders: OrdersDetailSection
    products: ProductBreakdownSection
    customers: CustomerBreakdownSection
    condensed_view: bool = False

    def condensed(self, limit: int = DEFAULT_TOP_N) -> "FinancialReport":
        """Return a short-form copy keeping the top ``limit`` rows of each section.

        Rows are ranked by the key each section is already ranked by (orders
        by total, products by revenue, customers by spend, trend rows by
        revenue). The kept trend rows stay in sub-period order. Nothing is
        re-aggregated: the trend total and the section counts still describe
        the whole period.
        """

        return replace(
            self,
            trend=TrendSection(
                rows=_top_rows(self.trend.rows, lambda row: row.revenue, limit, keep_order=True),
                total=self.trend.total,
            ),
            orders=self.orders.top(limit),
            products=self.products.top(limit),
            customers=self.customers.top(limit),
            condensed_view=True,
        )


def _top_rows(rows: Sequence, ranking, limit: int, *, keep_order: bool = False) -> tuple:
    ranked = sorted(range(len(rows)), key=lambda index: ranking(rows[index]), reverse=True)
    kept = ranked[: max(limit, 0)]
    if keep_order:
        kept.sort()
    return tuple(rows[index] for index in kept)


def build_summary_section(
    period: Period,
    metrics: FinancialMetrics,
    *,
    generated_at: datetime,
    currency: str = DEFAULT_CURRENCY,
) -> SummarySection:
    """Pre-formatted summary rows for ``metrics``.

    Profit Margin goes through ``format_ratio_percent`` like every other
    margin in the report, so zero revenue displays ``0.0%`` rather than a
    bare ``0%``.
    """

    def money(metric: str, value: Optional[int]) -> SummaryRow:
        return SummaryRow(metric, value, ValueUnit.CURRENCY, format_currency(value, currency))

    margin = ratio_basis_points(metrics.net_profit, metrics.revenue)
    rows = (
        money("Total Revenue (incl. Shipping)", metrics.revenue),
        money("Cost of Goods Sold", metrics.cogs),
        money("Gross Profit", metrics.gross_profit),
        money("Total Expenses", metrics.expenses),
        money("Net Profit", metrics.net_profit),
        SummaryRow("Total Orders", metrics.order_count, ValueUnit.COUNT, str(metrics.order_count)),
        money("Average Order Value", metrics.aov),
        SummaryRow(
            "Profit Margin",
            margin,
            ValueUnit.PERCENT,
            format_ratio_percent(metrics.net_profit, metrics.revenue),
        ),
    )
    return SummarySection(
        title=REPORT_TITLE,
        period_label=period.label,
        generated_at=generated_at,
        rows=rows,
    )


def _trend_row(
    label: str,
    date: Optional[datetime],
    revenue: int,
    expenses: int,
    gross_profit: Optional[int],
    net_profit: int,
) -> TrendRow:
    return TrendRow(
        label=label,
        date=date,
        revenue=revenue,
        expenses=expenses,
        gross_profit=gross_profit,
        net_profit=net_profit,
        margin_bps=ratio_basis_points(net_profit, revenue),
    )


def build_trend_section(
    period: Period,
    metrics: FinancialMetrics,
    time_series: Iterable[TimeSeriesPoint],
) -> TrendSection:
    """One row per time series point and a TOTAL row taken from ``metrics``.

    The total is the parent period's own aggregation and is not the sum of
    the rows above it.
    """

    rows = tuple(
        _trend_row(point.label, point.date, point.revenue, point.expenses, point.gross_profit, point.net_profit)
        for point in time_series
    )
    total = _trend_row(
        TOTAL_LABEL,
        period.start,
        metrics.revenue,
        metrics.expenses,
        metrics.gross_profit,
        metrics.net_profit,
    )
    return TrendSection(rows=rows, total=total)


def build_orders_section(orders: Iterable[DetailedOrder]) -> OrdersDetailSection:
    rows: List[OrderDetailRow] = []
    for order in orders:
        customer = order.customer
        subtotal = order.amount_minor or 0
        shipping = order.shipping_minor or 0
        rows.append(
            OrderDetailRow(
                order_ref=order.order_number or order.id,
                created_at=order.created_at,
                customer_name=customer.full_name if customer else None,
                customer_phone=customer.phone if customer else None,
                customer_email=customer.email if customer else None,
                status=order.status,
                source=order.source or DEFAULT_ORDER_SOURCE,
                item_count=len(order.items),
                subtotal=subtotal,
                shipping=shipping,
                total=subtotal + shipping,
            )
        )
    return OrdersDetailSection(rows=tuple(rows))


def product_label(item: OrderItemRow) -> str:
    name = item.product_name or UNKNOWN_PRODUCT
    if item.variant_title:
        return f"{name} - {item.variant_title}"
    return name


def build_products_section(orders: Iterable[DetailedOrder]) -> ProductBreakdownSection:
    items = [item for order in orders for item in order.items]
    grouped = group_by_dimension(
        items,
        key=product_label,
        amount=lambda item: (item.quantity or 0) * (item.unit_price_minor or 0),
        weight=lambda item: item.quantity,
        default_key=UNKNOWN_PRODUCT,
    )
    return ProductBreakdownSection(
        rows=tuple(ProductRow(name=row.key, quantity=row.count, revenue=row.amount) for row in grouped)
    )


def _customer_name(order: DetailedOrder) -> Optional[str]:
    if order.customer is None:
        return None
    return order.customer.full_name


def build_customers_section(orders: Iterable[DetailedOrder]) -> CustomerBreakdownSection:
    orders = list(orders)
    grouped = group_by_dimension(
        orders,
        key=_customer_name,
        amount=lambda order: order.total_minor,
        default_key=UNKNOWN_CUSTOMER,
    )

    phones: dict[str, Optional[str]] = {}
    for order in orders:
        name = _customer_name(order) or UNKNOWN_CUSTOMER
        if phones.get(name) is None and order.customer is not None:
            phones[name] = order.customer.phone

    return CustomerBreakdownSection(
        rows=tuple(
            CustomerRow(
                name=row.key,
                phone=phones.get(row.key),
                order_count=row.count,
                total_spend=row.amount,
            )
            for row in grouped
        )
    )


def compose_report(
    period: Period,
    metrics: FinancialMetrics,
    time_series: Iterable[TimeSeriesPoint],
    detailed_orders: Iterable[DetailedOrder],
    *,
    generated_at: datetime,
    currency: str = DEFAULT_CURRENCY,
) -> FinancialReport:
    """Assemble every report section for ``period``.

    ``detailed_orders`` is used as fetched: every order appears in the orders
    section and feeds the product and customer breakdowns.
    """

    detailed_orders = list(detailed_orders)
    return FinancialReport(
        period=period,
        currency=currency,
        summary=build_summary_section(period, metrics, generated_at=generated_at, currency=currency),
        trend=build_trend_section(period, metrics, time_series),
        orders=build_orders_section(detailed_orders),
        products=build_products_section(detailed_orders),
        customers=build_customers_section(detailed_orders),
    )

"""Financial calculations over integer minor-unit amounts.

Every function here is pure and total: no floating point is used for money,
and ratios are expressed in basis points (100 = 1%). Decimal values only
appear in the display helpers at the bottom of the module.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from .finance_types import (
    ExpenseRow,
    FinancialComparison,
    FinancialMetrics,
    MetricChanges,
    OrderItemRow,
    OrderRow,
)

BASIS_POINTS = 10_000
DEFAULT_CURRENCY = "QAR"
REVENUE_ELIGIBLE_STATUSES = frozenset({"paid", "completed", "shipped"})


def round_half_up_div(numerator: int, denominator: int) -> int:
    """Divide two integers rounding halves towards positive infinity.

    Matches ``Math.round(numerator / denominator)`` without going through
    floats. ``denominator`` must not be zero.
    """

    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    return (2 * numerator + denominator) // (2 * denominator)


def calculate_gross_profit(revenue: int, cogs: Optional[int]) -> Optional[int]:
    if cogs is None:
        return None
    return revenue - cogs


def calculate_net_profit(revenue: int, cogs: Optional[int], expenses: int) -> int:
    """Gross profit minus expenses, or revenue minus expenses without COGS."""

    gross_profit = calculate_gross_profit(revenue, cogs)
    if gross_profit is not None:
        return gross_profit - expenses
    return revenue - expenses


def calculate_aov(revenue: int, order_count: int) -> int:
    if order_count == 0:
        return 0
    return round_half_up_div(revenue, order_count)


def calculate_percent_change(current: int, previous: int) -> int:
    """Change from ``previous`` to ``current`` in basis points.

    A zero baseline reports 100% growth for any positive value and 0 otherwise.
    """

    if previous == 0:
        return BASIS_POINTS if current > 0 else 0
    return round_half_up_div((current - previous) * BASIS_POINTS, abs(previous))


def calculate_share(value: int, total: int) -> int:
    """Share of ``value`` in ``total`` in basis points, 0 for an empty total."""

    if total == 0:
        return 0
    return round_half_up_div(value * BASIS_POINTS, total)


def ratio_basis_points(numerator: int, denominator: int) -> int:
    if denominator == 0:
        return 0
    return round_half_up_div(numerator * BASIS_POINTS, denominator)


def _order_shipping(order: OrderRow) -> int:
    return order.shipping_minor or 0


def is_revenue_eligible(order: OrderRow) -> bool:
    """Rows without a status are trusted to be pre-filtered by the caller."""

    return order.status is None or order.status in REVENUE_ELIGIBLE_STATUSES


def aggregate_metrics(
    orders: Iterable[OrderRow],
    expenses: Iterable[ExpenseRow],
    order_items: Iterable[OrderItemRow] = (),
) -> FinancialMetrics:
    """Reduce one period's raw rows into :class:`FinancialMetrics`.

    Shipping is billed revenue and is also booked back as an expense. COGS is
    only known when at least one line item carries a unit cost, and items
    without cost data are left out of the sum rather than counted as free.
    Orders outside the revenue-eligible statuses, and their items, are ignored.
    """

    all_orders = list(orders)
    orders = [order for order in all_orders if is_revenue_eligible(order)]
    excluded_ids = {order.id for order in all_orders if not is_revenue_eligible(order)}

    revenue = sum((order.amount_minor or 0) + _order_shipping(order) for order in orders)
    shipping_expenses = sum(_order_shipping(order) for order in orders)
    total_expenses = sum(expense.amount_minor or 0 for expense in expenses) + shipping_expenses

    costed_items = [
        item
        for item in order_items
        if item.unit_cost_minor is not None and item.order_id not in excluded_ids
    ]
    cogs: Optional[int] = None
    if costed_items:
        cogs = sum((item.quantity or 0) * item.unit_cost_minor for item in costed_items)

    order_count = len(orders)
    return FinancialMetrics(
        revenue=revenue,
        cogs=cogs,
        gross_profit=calculate_gross_profit(revenue, cogs),
        expenses=total_expenses,
        net_profit=calculate_net_profit(revenue, cogs, total_expenses),
        order_count=order_count,
        aov=calculate_aov(revenue, order_count),
    )


def build_comparison(current: FinancialMetrics, previous: FinancialMetrics) -> FinancialComparison:
    return FinancialComparison(
        current=current,
        previous=previous,
        changes=MetricChanges(
            revenue=calculate_percent_change(current.revenue, previous.revenue),
            expenses=calculate_percent_change(current.expenses, previous.expenses),
            net_profit=calculate_percent_change(current.net_profit, previous.net_profit),
            order_count=calculate_percent_change(current.order_count, previous.order_count),
            aov=calculate_percent_change(current.aov, previous.aov),
        ),
    )


# Display helpers


def basis_points_to_percent(bps: Optional[int]) -> str:
    """Format basis points as a one-decimal percentage such as ``12.3%``."""

    if bps is None:
        return "N/A"
    percent = (Decimal(bps) / Decimal(100)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


def format_ratio_percent(numerator: int, denominator: int) -> str:
    return basis_points_to_percent(ratio_basis_points(numerator, denominator))


def minor_to_decimal(amount_minor: Optional[int]) -> Decimal:
    return (Decimal(amount_minor or 0) / Decimal(100)).quantize(Decimal("0.01"))


def format_currency(
    amount_minor: Optional[int],
    currency: str = DEFAULT_CURRENCY,
    *,
    show_symbol: bool = True,
) -> str:
    if amount_minor is None:
        return "N/A"
    amount = minor_to_decimal(amount_minor)
    if not show_symbol:
        return f"{amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP):,}"
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency} {abs(amount):,.2f}"

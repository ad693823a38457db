"""Share-of-total breakdowns grouped by an arbitrary dimension."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .finance_types import BreakdownRow, ExpenseByCategory, ExpenseRow, OrderRow, RevenueBySource
from .financial_calculations import calculate_share

T = TypeVar("T")

DEFAULT_ORDER_SOURCE = "walk_in"
DEFAULT_EXPENSE_CATEGORY = "Other"


def group_by_dimension(
    rows: Iterable[T],
    key: Callable[[T], Optional[str]],
    amount: Callable[[T], Optional[int]],
    *,
    weight: Optional[Callable[[T], Optional[int]]] = None,
    default_key: str = DEFAULT_EXPENSE_CATEGORY,
) -> List[BreakdownRow]:
    """Group ``rows`` by ``key`` and rank the groups by summed ``amount``.

    ``count`` holds the number of rows per group, or the sum of ``weight``
    when given. Groups with equal amounts keep the order in which they were
    first seen. Shares are rounded per group, so they add up to
    ``10000 +- (groups - 1)`` basis points.
    """

    totals: Dict[str, List[int]] = {}
    grand_total = 0

    for row in rows:
        group = key(row) or default_key
        value = amount(row) or 0
        increment = 1 if weight is None else (weight(row) or 0)
        bucket = totals.setdefault(group, [0, 0])
        bucket[0] += value
        bucket[1] += increment
        grand_total += value

    grouped = [
        BreakdownRow(
            key=group,
            amount=group_amount,
            percentage_bps=calculate_share(group_amount, grand_total),
            count=group_count,
        )
        for group, (group_amount, group_count) in totals.items()
    ]
    return sorted(grouped, key=lambda row: row.amount, reverse=True)


def top_n(rows: Sequence[T], limit: int) -> List[T]:
    return list(rows[: max(limit, 0)])


def revenue_by_source(orders: Iterable[OrderRow]) -> List[RevenueBySource]:
    return group_by_dimension(
        orders,
        key=lambda order: order.source,
        amount=lambda order: (order.amount_minor or 0) + (order.shipping_minor or 0),
        default_key=DEFAULT_ORDER_SOURCE,
    )


def expenses_by_category(expenses: Iterable[ExpenseRow]) -> List[ExpenseByCategory]:
    return group_by_dimension(
        expenses,
        key=lambda expense: expense.category,
        amount=lambda expense: expense.amount_minor,
        default_key=DEFAULT_EXPENSE_CATEGORY,
    )

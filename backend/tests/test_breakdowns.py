from __future__ import annotations

from decimal import Decimal

from backend.app.services.breakdowns import (
    expenses_by_category,
    group_by_dimension,
    revenue_by_source,
    top_n,
)
from backend.app.services.finance_types import ExpenseRow, OrderRow


def test_revenue_by_source_includes_shipping_and_defaults_to_walk_in():
    orders = [
        OrderRow(id="1", amount_minor=10000, shipping_minor=500, source="shopify"),
        OrderRow(id="2", amount_minor=4000, source=None),
        OrderRow(id="3", amount_minor=1000, source="shopify"),
    ]

    rows = revenue_by_source(orders)

    assert [(row.key, row.amount, row.count) for row in rows] == [
        ("shopify", 11500, 2),
        ("walk_in", 4000, 1),
    ]
    assert [row.percentage_bps for row in rows] == [7419, 2581]
    assert rows[0].percentage == Decimal("74.19")


def test_expenses_without_category_fall_into_other():
    rows = expenses_by_category(
        [
            ExpenseRow(amount_minor=1000, category="Fabric"),
            ExpenseRow(amount_minor=300, category=None),
            ExpenseRow(amount_minor=200, category=""),
        ]
    )

    assert [(row.key, row.amount, row.count) for row in rows] == [
        ("Fabric", 1000, 1),
        ("Other", 500, 2),
    ]


def test_ties_keep_first_seen_order():
    rows = group_by_dimension(
        ["b", "a", "c", "a", "b"],
        key=lambda value: value,
        amount=lambda value: 100 if value != "c" else 50,
    )

    assert [row.key for row in rows] == ["b", "a", "c"]


def test_zero_total_gives_zero_shares():
    rows = group_by_dimension(
        [ExpenseRow(amount_minor=0, category="Rent")],
        key=lambda expense: expense.category,
        amount=lambda expense: expense.amount_minor,
    )

    assert rows[0].percentage_bps == 0


def test_shares_sum_to_ten_thousand_within_rounding_bound():
    rows = group_by_dimension(
        range(7),
        key=lambda value: f"group-{value}",
        amount=lambda value: 1,
    )

    total = sum(row.percentage_bps for row in rows)
    assert abs(total - 10000) <= len(rows) - 1


def test_weight_replaces_row_count():
    rows = group_by_dimension(
        [("Abaya", 2), ("Abaya", 3), ("Kaftan", 1)],
        key=lambda item: item[0],
        amount=lambda item: item[1] * 100,
        weight=lambda item: item[1],
    )

    assert [(row.key, row.count) for row in rows] == [("Abaya", 5), ("Kaftan", 1)]


def test_top_n_keeps_leading_rows():
    assert top_n([1, 2, 3], 2) == [1, 2]
    assert top_n([1, 2, 3], 10) == [1, 2, 3]
    assert top_n([1, 2, 3], -1) == []

"""Read-side queries feeding the financial metrics services.

Every query filters timestamps with ``start <= ts < end_exclusive`` so that
adjacent periods never share a boundary instant.
"""

from __future__ import annotations

import logging
from typing import Callable, ContextManager, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .. import models
from .breakdowns import expenses_by_category, group_by_dimension, revenue_by_source, top_n
from .finance_types import (
    BreakdownRow,
    CustomerRef,
    DetailedOrder,
    ExpenseRow,
    FinancialMetrics,
    OrderItemRow,
    OrderRow,
    Period,
    TimeSeriesPoint,
)
from .financial_calculations import aggregate_metrics
from .time_series import build_time_series

LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]

UNKNOWN_PRODUCT = "Unknown Product"


class FinanceDataError(RuntimeError):
    """Raised when financial rows cannot be retrieved from the database."""


def _status_value(status) -> Optional[str]:
    if status is None:
        return None
    return getattr(status, "value", str(status))


def _to_order_row(order: models.Order) -> OrderRow:
    return OrderRow(
        id=str(order.id),
        amount_minor=order.total_amount_minor or 0,
        shipping_minor=order.total_shipping_minor or 0,
        source=order.source,
        status=_status_value(order.status),
        created_at=order.created_at,
        customer_id=str(order.customer_id) if order.customer_id else None,
    )


def _to_item_row(item: models.OrderItem) -> OrderItemRow:
    return OrderItemRow(
        quantity=item.quantity,
        unit_price_minor=item.unit_price_minor,
        unit_cost_minor=item.unit_cost_minor,
        product_name=item.product_name,
        variant_title=item.variant_title,
        order_id=str(item.order_id),
    )


class FinanceQueryService:
    """Fetch period-scoped rows and feed them to the pure aggregation helpers."""

    @staticmethod
    def _revenue_orders_query(db: Session, period: Period):
        return (
            db.query(models.Order)
            .filter(models.Order.created_at >= period.start)
            .filter(models.Order.created_at < period.end_exclusive)
            .filter(models.Order.status.in_(models.REVENUE_STATUSES))
        )

    @staticmethod
    def fetch_revenue_orders(db: Session, period: Period) -> List[OrderRow]:
        """Orders in a revenue-eligible status created during ``period``."""

        try:
            orders = (
                FinanceQueryService._revenue_orders_query(db, period)
                .order_by(models.Order.created_at)
                .all()
            )
        except SQLAlchemyError as exc:
            LOGGER.error("Error fetching orders for %s: %s", period.label, exc)
            raise FinanceDataError("Failed to fetch orders") from exc
        return [_to_order_row(order) for order in orders]

    @staticmethod
    def fetch_expenses(db: Session, period: Period) -> List[ExpenseRow]:
        try:
            expenses = (
                db.query(models.Expense)
                .filter(models.Expense.incurred_at >= period.start)
                .filter(models.Expense.incurred_at < period.end_exclusive)
                .order_by(models.Expense.incurred_at)
                .all()
            )
        except SQLAlchemyError as exc:
            LOGGER.error("Error fetching expenses for %s: %s", period.label, exc)
            raise FinanceDataError("Failed to fetch expenses") from exc
        return [
            ExpenseRow(
                amount_minor=expense.amount_minor,
                category=expense.category,
                incurred_at=expense.incurred_at,
            )
            for expense in expenses
        ]

    @staticmethod
    def fetch_order_items(db: Session, order_ids: Sequence[str]) -> List[OrderItemRow]:
        if not order_ids:
            return []
        try:
            items = (
                db.query(models.OrderItem)
                .filter(models.OrderItem.order_id.in_(list(order_ids)))
                .all()
            )
        except SQLAlchemyError as exc:
            LOGGER.error("Error fetching order items: %s", exc)
            raise FinanceDataError("Failed to fetch order items") from exc
        return [_to_item_row(item) for item in items]

    @staticmethod
    def fetch_financial_metrics(db: Session, period: Period) -> FinancialMetrics:
        orders = FinanceQueryService.fetch_revenue_orders(db, period)
        expenses = FinanceQueryService.fetch_expenses(db, period)
        items = FinanceQueryService.fetch_order_items(db, [order.id for order in orders])
        return aggregate_metrics(orders, expenses, items)

    @staticmethod
    def fetch_revenue_by_source(db: Session, period: Period) -> List[BreakdownRow]:
        return revenue_by_source(FinanceQueryService.fetch_revenue_orders(db, period))

    @staticmethod
    def fetch_expenses_by_category(db: Session, period: Period) -> List[BreakdownRow]:
        return expenses_by_category(FinanceQueryService.fetch_expenses(db, period))

    @staticmethod
    def fetch_time_series(
        db: Session,
        period: Period,
        *,
        session_factory: Optional[SessionFactory] = None,
        max_workers: int = 1,
    ) -> List[TimeSeriesPoint]:
        """Aggregate every sub-period of ``period`` independently.

        Parallel loading needs ``session_factory`` so each worker opens its own
        session; otherwise the sub-periods are loaded one after another on
        ``db``.
        """

        if session_factory is not None and max_workers > 1:

            def load(sub_period: Period) -> FinancialMetrics:
                with session_factory() as worker_db:
                    return FinanceQueryService.fetch_financial_metrics(worker_db, sub_period)

            return build_time_series(period, load, max_workers=max_workers)

        return build_time_series(
            period,
            lambda sub_period: FinanceQueryService.fetch_financial_metrics(db, sub_period),
        )

    @staticmethod
    def fetch_detailed_orders(db: Session, period: Period) -> List[DetailedOrder]:
        """Every order created during ``period``, whatever its status, newest first."""

        try:
            orders = (
                db.query(models.Order)
                .options(
                    selectinload(models.Order.customer),
                    selectinload(models.Order.items),
                )
                .filter(models.Order.created_at >= period.start)
                .filter(models.Order.created_at < period.end_exclusive)
                .order_by(models.Order.created_at.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            LOGGER.error("Error fetching detailed orders for %s: %s", period.label, exc)
            raise FinanceDataError("Failed to fetch detailed orders") from exc

        detailed: List[DetailedOrder] = []
        for order in orders:
            customer = order.customer
            detailed.append(
                DetailedOrder(
                    id=str(order.id),
                    order_number=order.order_number,
                    created_at=order.created_at,
                    status=_status_value(order.status),
                    source=order.source,
                    amount_minor=order.total_amount_minor or 0,
                    shipping_minor=order.total_shipping_minor or 0,
                    customer=(
                        CustomerRef(
                            id=str(customer.id),
                            full_name=customer.full_name,
                            email=customer.email,
                            phone=customer.phone,
                        )
                        if customer is not None
                        else None
                    ),
                    items=tuple(_to_item_row(item) for item in order.items),
                )
            )
        return detailed

    @staticmethod
    def fetch_top_products(db: Session, period: Period, *, limit: int = 5) -> List[BreakdownRow]:
        """Best selling products of revenue-eligible orders, ranked by revenue.

        ``count`` holds the quantity sold. Items are grouped by product name
        only, unlike the report breakdown which splits variants.
        """

        orders = FinanceQueryService.fetch_revenue_orders(db, period)
        items = FinanceQueryService.fetch_order_items(db, [order.id for order in orders])
        grouped = group_by_dimension(
            items,
            key=lambda item: item.product_name,
            amount=lambda item: (item.unit_price_minor or 0) * (item.quantity or 0),
            weight=lambda item: item.quantity,
            default_key=UNKNOWN_PRODUCT,
        )
        return top_n(grouped, limit)

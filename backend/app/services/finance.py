"""High level finance operations used by the API and the export script."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..config import FinanceSettings
from .finance_queries import FinanceQueryService, SessionFactory
from .finance_reports import FinancialReport, compose_report
from .finance_types import (
    BreakdownRow,
    FinancialComparison,
    FinancialMetrics,
    Period,
    TimeSeriesPoint,
)
from .financial_calculations import build_comparison
from .periods import previous_period

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinanceOverview:
    """Everything the finance dashboard shows for one period."""

    period: Period
    previous_period: Period
    comparison: FinancialComparison
    revenue_by_source: List[BreakdownRow]
    expenses_by_category: List[BreakdownRow]
    time_series: List[TimeSeriesPoint]
    top_products: List[BreakdownRow]


class FinanceService:
    """Combine period queries into comparisons, overviews and reports."""

    @staticmethod
    def metrics(db: Session, period: Period) -> FinancialMetrics:
        return FinanceQueryService.fetch_financial_metrics(db, period)

    @staticmethod
    def comparison(db: Session, period: Period) -> FinancialComparison:
        """Compare ``period`` with the period of the same kind right before it."""

        current = FinanceQueryService.fetch_financial_metrics(db, period)
        previous = FinanceQueryService.fetch_financial_metrics(db, previous_period(period))
        return build_comparison(current, previous)

    @staticmethod
    def time_series(
        db: Session,
        period: Period,
        *,
        settings: Optional[FinanceSettings] = None,
        session_factory: Optional[SessionFactory] = None,
    ) -> List[TimeSeriesPoint]:
        workers = settings.time_series_workers if settings else 1
        return FinanceQueryService.fetch_time_series(
            db,
            period,
            session_factory=session_factory,
            max_workers=workers,
        )

    @staticmethod
    def overview(
        db: Session,
        period: Period,
        *,
        settings: FinanceSettings,
        session_factory: Optional[SessionFactory] = None,
    ) -> FinanceOverview:
        previous = previous_period(period)
        current_metrics = FinanceQueryService.fetch_financial_metrics(db, period)
        previous_metrics = FinanceQueryService.fetch_financial_metrics(db, previous)
        return FinanceOverview(
            period=period,
            previous_period=previous,
            comparison=build_comparison(current_metrics, previous_metrics),
            revenue_by_source=FinanceQueryService.fetch_revenue_by_source(db, period),
            expenses_by_category=FinanceQueryService.fetch_expenses_by_category(db, period),
            time_series=FinanceService.time_series(
                db, period, settings=settings, session_factory=session_factory
            ),
            top_products=FinanceQueryService.fetch_top_products(
                db, period, limit=settings.report_top_n
            ),
        )

    @staticmethod
    def build_report(
        db: Session,
        period: Period,
        *,
        generated_at: datetime,
        settings: FinanceSettings,
        session_factory: Optional[SessionFactory] = None,
    ) -> FinancialReport:
        """Fetch every input of a report and compose its sections.

        Any fetch failure propagates and no report is produced.
        """

        metrics = FinanceQueryService.fetch_financial_metrics(db, period)
        series = FinanceService.time_series(
            db, period, settings=settings, session_factory=session_factory
        )
        orders = FinanceQueryService.fetch_detailed_orders(db, period)
        LOGGER.info(
            "Composing financial report for %s (%s orders, %s trend points)",
            period.label,
            len(orders),
            len(series),
        )
        return compose_report(
            period,
            metrics,
            series,
            orders,
            generated_at=generated_at,
            currency=settings.currency,
        )

"""Router exposing financial metrics, breakdowns and report exports."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..config import FinanceSettings, load_finance_settings
from ..database import get_db, session_scope
from ..services import FinanceDataError, FinanceQueryService, FinanceService, PeriodQueryError
from ..services.finance_queries import SessionFactory
from ..services.finance_types import Period
from ..services.periods import (
    current_period,
    parse_period_kind,
    period_from_query,
    previous_period,
)
from ..services.report_exports import ReportFormat, render_report

LOGGER = logging.getLogger(__name__)

router = APIRouter()


def get_today() -> date:
    """Clock used to resolve the current period; overridden in tests."""

    return date.today()


def get_now() -> datetime:
    return datetime.now()


def get_finance_settings() -> FinanceSettings:
    return load_finance_settings()


def get_session_factory() -> SessionFactory:
    return session_scope


def resolve_query_period(
    period_type: str = Query("month", description="One of month, quarter or year"),
    year: Optional[int] = Query(None, description="Calendar year; defaults to the current period"),
    month: Optional[int] = Query(None, description="Month number (1-12) for monthly periods"),
    quarter: Optional[int] = Query(None, description="Quarter number (1-4) for quarterly periods"),
    today: date = Depends(get_today),
) -> Period:
    try:
        kind = parse_period_kind(period_type)
        if year is None:
            return current_period(kind, today)
        return period_from_query(kind, year, month=month, quarter=quarter)
    except PeriodQueryError as exc:
        LOGGER.warning(
            "Rejecting finance request due to invalid period",
            extra={"period_type": period_type, "year": year, "month": month, "quarter": quarter},
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@contextmanager
def _finance_errors(action: str) -> Iterator[None]:
    try:
        yield
    except FinanceDataError as exc:
        LOGGER.exception("Failed to %s", action, exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Financial data could not be loaded. Please try again later.",
        ) from exc


@router.get("/overview", response_model=schemas.FinanceOverviewResponse)
def get_finance_overview(
    period: Period = Depends(resolve_query_period),
    db: Session = Depends(get_db),
    settings: FinanceSettings = Depends(get_finance_settings),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> schemas.FinanceOverviewResponse:
    """Return comparison, breakdowns, trend and top products for one period."""

    with _finance_errors("build finance overview"):
        overview = FinanceService.overview(
            db, period, settings=settings, session_factory=session_factory
        )
    return schemas.FinanceOverviewResponse.model_validate(overview)


@router.get("/metrics", response_model=schemas.MetricsResponse)
def get_financial_metrics(
    period: Period = Depends(resolve_query_period),
    db: Session = Depends(get_db),
) -> schemas.MetricsResponse:
    with _finance_errors("load financial metrics"):
        metrics = FinanceService.metrics(db, period)
    return schemas.MetricsResponse(
        period=schemas.PeriodRead.model_validate(period),
        metrics=schemas.FinancialMetricsRead.model_validate(metrics),
    )


@router.get("/comparison", response_model=schemas.ComparisonResponse)
def get_financial_comparison(
    period: Period = Depends(resolve_query_period),
    db: Session = Depends(get_db),
) -> schemas.ComparisonResponse:
    with _finance_errors("compare financial periods"):
        comparison = FinanceService.comparison(db, period)
    return schemas.ComparisonResponse(
        period=schemas.PeriodRead.model_validate(period),
        previous_period=schemas.PeriodRead.model_validate(previous_period(period)),
        comparison=schemas.FinancialComparisonRead.model_validate(comparison),
    )


@router.get("/revenue-by-source", response_model=schemas.BreakdownResponse)
def get_revenue_by_source(
    period: Period = Depends(resolve_query_period),
    db: Session = Depends(get_db),
) -> schemas.BreakdownResponse:
    with _finance_errors("load revenue by source"):
        rows = FinanceQueryService.fetch_revenue_by_source(db, period)
    return schemas.BreakdownResponse(
        period=schemas.PeriodRead.model_validate(period),
        items=[schemas.BreakdownRowRead.model_validate(row) for row in rows],
    )


@router.get("/expenses-by-category", response_model=schemas.BreakdownResponse)
def get_expenses_by_category(
    period: Period = Depends(resolve_query_period),
    db: Session = Depends(get_db),
) -> schemas.BreakdownResponse:
    with _finance_errors("load expenses by category"):
        rows = FinanceQueryService.fetch_expenses_by_category(db, period)
    return schemas.BreakdownResponse(
        period=schemas.PeriodRead.model_validate(period),
        items=[schemas.BreakdownRowRead.model_validate(row) for row in rows],
    )


@router.get("/time-series", response_model=schemas.TimeSeriesResponse)
def get_time_series(
    period: Period = Depends(resolve_query_period),
    db: Session = Depends(get_db),
    settings: FinanceSettings = Depends(get_finance_settings),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> schemas.TimeSeriesResponse:
    """Return one point per day of a month, or per month of a quarter or year."""

    with _finance_errors("build time series"):
        points = FinanceService.time_series(
            db, period, settings=settings, session_factory=session_factory
        )
    return schemas.TimeSeriesResponse(
        period=schemas.PeriodRead.model_validate(period),
        points=[schemas.TimeSeriesPointRead.model_validate(point) for point in points],
    )


@router.get("/top-products", response_model=schemas.BreakdownResponse)
def get_top_products(
    period: Period = Depends(resolve_query_period),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of products to return"),
    db: Session = Depends(get_db),
    settings: FinanceSettings = Depends(get_finance_settings),
) -> schemas.BreakdownResponse:
    with _finance_errors("load top products"):
        rows = FinanceQueryService.fetch_top_products(
            db, period, limit=limit or settings.report_top_n
        )
    return schemas.BreakdownResponse(
        period=schemas.PeriodRead.model_validate(period),
        items=[schemas.BreakdownRowRead.model_validate(row) for row in rows],
    )


@router.get("/orders", response_model=schemas.DetailedOrdersResponse)
def get_detailed_orders(
    period: Period = Depends(resolve_query_period),
    db: Session = Depends(get_db),
) -> schemas.DetailedOrdersResponse:
    """Return every order of the period, whatever its status, newest first."""

    with _finance_errors("load detailed orders"):
        orders = FinanceQueryService.fetch_detailed_orders(db, period)
    return schemas.DetailedOrdersResponse(
        period=schemas.PeriodRead.model_validate(period),
        items=[schemas.DetailedOrderRead.model_validate(order) for order in orders],
    )


@router.get("/reports/export")
def export_financial_report(
    period: Period = Depends(resolve_query_period),
    report_format: ReportFormat = Query(ReportFormat.XLSX, alias="format"),
    variant: schemas.ReportVariant = Query(schemas.ReportVariant.FULL),
    db: Session = Depends(get_db),
    settings: FinanceSettings = Depends(get_finance_settings),
    session_factory: SessionFactory = Depends(get_session_factory),
    now: datetime = Depends(get_now),
) -> Response:
    """Download the financial report of a period as a workbook, PDF or CSV file."""

    with _finance_errors("build financial report"):
        report = FinanceService.build_report(
            db,
            period,
            generated_at=now,
            settings=settings,
            session_factory=session_factory,
        )
    if variant is schemas.ReportVariant.SUMMARY:
        report = report.condensed(settings.report_top_n)

    rendered = render_report(report, report_format)
    LOGGER.info(
        "Exported %s financial report for %s",
        report_format.value,
        period.label,
        extra={"variant": variant.value, "size": len(rendered.content)},
    )
    return Response(
        content=rendered.content,
        media_type=rendered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )

"""Chart-ready time series built from independent sub-period aggregations."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List

from .finance_types import FinancialMetrics, Period, TimeSeriesPoint
from .periods import sub_periods

LOGGER = logging.getLogger(__name__)

MetricsLoader = Callable[[Period], FinancialMetrics]


def point_from_metrics(period: Period, metrics: FinancialMetrics) -> TimeSeriesPoint:
    return TimeSeriesPoint(
        label=period.label,
        date=period.start,
        revenue=metrics.revenue,
        expenses=metrics.expenses,
        gross_profit=metrics.gross_profit,
        net_profit=metrics.net_profit,
    )


def build_time_series(
    period: Period,
    load_metrics: MetricsLoader,
    *,
    max_workers: int = 1,
) -> List[TimeSeriesPoint]:
    """Run ``load_metrics`` once per sub-period of ``period``.

    Each sub-period goes through the same fetch and aggregation path as a
    single-period request. With ``max_workers > 1`` the loads run on a thread
    pool, so ``load_metrics`` must not share a database session between
    calls. Points are always returned in chronological order.
    """

    periods = sub_periods(period)
    if not periods:
        return []

    LOGGER.debug(
        "Building time series for %s with %s sub-periods (workers=%s)",
        period.label,
        len(periods),
        max_workers,
    )

    if max_workers > 1 and len(periods) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(periods))) as executor:
            results = list(executor.map(load_metrics, periods))
    else:
        results = [load_metrics(sub_period) for sub_period in periods]

    return [point_from_metrics(sub_period, metrics) for sub_period, metrics in zip(periods, results)]

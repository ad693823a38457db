"""Resolution of reporting periods into concrete date intervals."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

from .finance_types import Period, PeriodKind

DateLike = Union[date, datetime]

_LAST_INSTANT = time(23, 59, 59, 999999)


class PeriodQueryError(ValueError):
    """Raised when period query parameters are outside their valid range."""


def parse_period_kind(raw: Union[str, PeriodKind]) -> PeriodKind:
    if isinstance(raw, PeriodKind):
        return raw
    try:
        return PeriodKind(str(raw).strip().lower())
    except ValueError as exc:
        raise PeriodQueryError(
            f"Invalid period type '{raw}', expected one of: month, quarter, year"
        ) from exc


def _as_date(anchor: DateLike) -> date:
    if isinstance(anchor, datetime):
        return anchor.date()
    return anchor


def _shift_months(day: date, months: int) -> date:
    """Return the first day of the month ``months`` away from ``day``."""

    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def _interval(first_day: date, last_day: date) -> tuple[datetime, datetime]:
    return datetime.combine(first_day, time.min), datetime.combine(last_day, _LAST_INSTANT)


def resolve_period(kind: Union[str, PeriodKind], anchor: DateLike) -> Period:
    """Return the period of the given kind that contains ``anchor``."""

    kind = parse_period_kind(kind)
    day = _as_date(anchor)

    if kind is PeriodKind.DAY:
        start, end = _interval(day, day)
        return Period(kind=kind, start=start, end=end, label=str(day.day))

    if kind is PeriodKind.MONTH:
        _, last = calendar.monthrange(day.year, day.month)
        start, end = _interval(date(day.year, day.month, 1), date(day.year, day.month, last))
        label = f"{calendar.month_name[day.month]} {day.year}"
        return Period(kind=kind, start=start, end=end, label=label)

    if kind is PeriodKind.QUARTER:
        quarter = (day.month - 1) // 3 + 1
        first_month = (quarter - 1) * 3 + 1
        last_month = first_month + 2
        _, last = calendar.monthrange(day.year, last_month)
        start, end = _interval(
            date(day.year, first_month, 1), date(day.year, last_month, last)
        )
        return Period(kind=kind, start=start, end=end, label=f"Q{quarter} {day.year}")

    start, end = _interval(date(day.year, 1, 1), date(day.year, 12, 31))
    return Period(kind=kind, start=start, end=end, label=str(day.year))


def current_period(kind: Union[str, PeriodKind], today: DateLike) -> Period:
    """Resolve the period containing ``today``; the caller supplies the clock."""

    return resolve_period(kind, today)


def previous_period(period: Period) -> Period:
    """Return the period of the same kind immediately before ``period``.

    The anchor is moved from the first day of ``period`` so variable month
    lengths never skip or repeat a month.
    """

    first_day = period.start.date()
    if period.kind is PeriodKind.DAY:
        anchor = first_day - timedelta(days=1)
    elif period.kind is PeriodKind.MONTH:
        anchor = _shift_months(first_day, -1)
    elif period.kind is PeriodKind.QUARTER:
        anchor = _shift_months(first_day, -3)
    else:
        anchor = date(first_day.year - 1, 1, 1)
    return resolve_period(period.kind, anchor)


def sub_periods(period: Period) -> List[Period]:
    """Split a period into days (for a month) or months (quarter, year)."""

    first_day = period.start.date()
    last_day = period.end.date()

    if period.kind is PeriodKind.DAY:
        return [period]

    if period.kind is PeriodKind.MONTH:
        days = (last_day - first_day).days + 1
        return [
            resolve_period(PeriodKind.DAY, first_day + timedelta(days=offset))
            for offset in range(days)
        ]

    months: List[Period] = []
    cursor = first_day
    while cursor <= last_day:
        months.append(resolve_period(PeriodKind.MONTH, cursor))
        cursor = _shift_months(cursor, 1)
    return months


def period_from_query(
    kind: Union[str, PeriodKind],
    year: int,
    month: Optional[int] = None,
    quarter: Optional[int] = None,
) -> Period:
    """Build a period from explicit query parameters.

    ``month`` and ``quarter`` default to the first one of the year when
    omitted. Out-of-range values raise :class:`PeriodQueryError` instead of
    being clamped.
    """

    kind = parse_period_kind(kind)
    if kind is PeriodKind.DAY:
        raise PeriodQueryError("Invalid period type 'day', expected one of: month, quarter, year")
    if year is None or not 1 <= int(year) <= 9999:
        raise PeriodQueryError(f"Invalid year '{year}', expected a value between 1 and 9999")
    year = int(year)

    if kind is PeriodKind.MONTH:
        month = 1 if month is None else int(month)
        if not 1 <= month <= 12:
            raise PeriodQueryError(f"Invalid month '{month}', expected a value between 1 and 12")
        return resolve_period(kind, date(year, month, 1))

    if kind is PeriodKind.QUARTER:
        quarter = 1 if quarter is None else int(quarter)
        if not 1 <= quarter <= 4:
            raise PeriodQueryError(f"Invalid quarter '{quarter}', expected a value between 1 and 4")
        return resolve_period(kind, date(year, (quarter - 1) * 3 + 1, 1))

    return resolve_period(kind, date(year, 1, 1))

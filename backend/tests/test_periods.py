from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from backend.app.services.finance_types import PeriodKind
from backend.app.services.periods import (
    PeriodQueryError,
    current_period,
    parse_period_kind,
    period_from_query,
    previous_period,
    resolve_period,
    sub_periods,
)


def test_resolve_month_covers_whole_month():
    period = resolve_period("month", date(2025, 3, 15))

    assert period.kind is PeriodKind.MONTH
    assert period.start == datetime(2025, 3, 1)
    assert period.end == datetime(2025, 3, 31, 23, 59, 59, 999999)
    assert period.end_exclusive == datetime(2025, 4, 1)
    assert period.label == "March 2025"


def test_resolve_quarter_and_year_labels():
    quarter = resolve_period(PeriodKind.QUARTER, date(2025, 5, 2))
    year = resolve_period(PeriodKind.YEAR, datetime(2025, 7, 4, 18, 45))

    assert quarter.label == "Q2 2025"
    assert quarter.start == datetime(2025, 4, 1)
    assert quarter.end.date() == date(2025, 6, 30)
    assert year.label == "2025"
    assert year.start == datetime(2025, 1, 1)
    assert year.end == datetime(2025, 12, 31, 23, 59, 59, 999999)


def test_resolve_uses_only_calendar_date_of_anchor():
    assert resolve_period("month", datetime(2025, 1, 31, 23, 59)) == resolve_period(
        "month", date(2025, 1, 31)
    )


def test_leap_year_february():
    period = resolve_period("month", date(2024, 2, 10))
    assert period.end.date() == date(2024, 2, 29)


def test_previous_period_crosses_year_boundary():
    assert previous_period(resolve_period("month", date(2025, 1, 20))).label == "December 2024"
    assert previous_period(resolve_period("quarter", date(2025, 2, 1))).label == "Q4 2024"
    assert previous_period(resolve_period("year", date(2025, 2, 1))).label == "2024"


def test_previous_period_twice_from_month_end_never_skips_a_month():
    march = resolve_period("month", date(2025, 3, 31))

    february = previous_period(march)
    january = previous_period(february)

    assert february.label == "February 2025"
    assert january.label == "January 2025"


def test_previous_of_january_31_is_december():
    january = resolve_period("month", date(2025, 1, 31))
    assert previous_period(january).label == "December 2024"
    assert previous_period(previous_period(january)).label == "November 2024"


def test_month_sub_periods_are_days_that_partition_the_month():
    march = resolve_period("month", date(2025, 3, 1))

    days = sub_periods(march)

    assert len(days) == 31
    assert [day.label for day in days[:3]] == ["1", "2", "3"]
    assert days[0].start == march.start
    assert days[-1].end == march.end
    for earlier, later in zip(days, days[1:]):
        assert earlier.end_exclusive == later.start
        assert earlier.end < later.start


def test_quarter_and_year_sub_periods_are_months():
    quarter = sub_periods(resolve_period("quarter", date(2025, 8, 1)))
    year = sub_periods(resolve_period("year", date(2025, 8, 1)))

    assert [month.label for month in quarter] == [
        "July 2025",
        "August 2025",
        "September 2025",
    ]
    assert len(year) == 12
    assert year[0].label == "January 2025"
    assert year[-1].label == "December 2025"


def test_day_period_is_its_own_sub_period():
    day = resolve_period("day", date(2025, 3, 5))
    assert sub_periods(day) == [day]


def test_boundary_instant_belongs_to_exactly_one_period():
    march = resolve_period("month", date(2025, 3, 1))
    april = resolve_period("month", date(2025, 4, 1))
    midnight = datetime(2025, 4, 1)

    assert not march.contains(midnight)
    assert april.contains(midnight)
    assert march.contains(midnight - timedelta(microseconds=1))


def test_period_from_query_defaults_month_and_quarter_to_first():
    assert period_from_query("month", 2025).label == "January 2025"
    assert period_from_query("quarter", 2025).label == "Q1 2025"
    assert period_from_query("quarter", 2025, quarter=3).label == "Q3 2025"
    assert period_from_query("year", 2024).label == "2024"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind": "month", "year": 2025, "month": 13},
        {"kind": "month", "year": 2025, "month": 0},
        {"kind": "quarter", "year": 2025, "quarter": 5},
        {"kind": "year", "year": 0},
        {"kind": "day", "year": 2025},
        {"kind": "fortnight", "year": 2025},
    ],
)
def test_period_from_query_rejects_out_of_range_values(kwargs):
    with pytest.raises(PeriodQueryError):
        period_from_query(**kwargs)


def test_period_query_error_is_a_value_error():
    assert issubclass(PeriodQueryError, ValueError)


def test_current_period_uses_injected_date():
    assert current_period("quarter", date(2025, 11, 3)).label == "Q4 2025"


def test_parse_period_kind_is_case_insensitive():
    assert parse_period_kind(" Month ") is PeriodKind.MONTH
    assert parse_period_kind(PeriodKind.YEAR) is PeriodKind.YEAR

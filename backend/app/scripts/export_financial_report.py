"""CLI utility to export the financial report of a period to a file."""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from ..config import load_finance_settings
from ..database import session_scope
from ..services import FinanceDataError, FinanceService, PeriodQueryError
from ..services.periods import current_period, parse_period_kind, period_from_query
from ..services.report_exports import ReportFormat, render_report

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export the financial report of a month, quarter or year."
    )
    parser.add_argument(
        "--period-type",
        default="month",
        choices=["month", "quarter", "year"],
        help="Kind of period to report on.",
    )
    parser.add_argument("--year", type=int, help="Calendar year; defaults to the current period.")
    parser.add_argument("--month", type=int, help="Month number (1-12).")
    parser.add_argument("--quarter", type=int, help="Quarter number (1-4).")
    parser.add_argument(
        "--format",
        dest="report_format",
        default=ReportFormat.XLSX.value,
        choices=[item.value for item in ReportFormat],
        help="Output file format.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Keep only the top rows of each section.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory the report file is written to.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None, *, today: Optional[date] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    settings = load_finance_settings()

    try:
        if args.year is None:
            period = current_period(parse_period_kind(args.period_type), today or date.today())
        else:
            period = period_from_query(
                args.period_type, args.year, month=args.month, quarter=args.quarter
            )
    except PeriodQueryError as exc:
        LOGGER.error("Invalid period: %s", exc)
        return 2

    try:
        with session_scope() as db:
            report = FinanceService.build_report(
                db,
                period,
                generated_at=datetime.now(),
                settings=settings,
                session_factory=session_scope,
            )
    except FinanceDataError as exc:
        LOGGER.error("Could not build the report for %s: %s", period.label, exc)
        return 1

    if args.summary:
        report = report.condensed(settings.report_top_n)

    rendered = render_report(report, args.report_format)
    args.output_dir.mkdir(parents=True, exist_ok=True)
    target = args.output_dir / rendered.filename
    target.write_bytes(rendered.content)
    LOGGER.info("Wrote %s (%s bytes)", target, len(rendered.content))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Environment driven configuration shared across the backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

CURRENCY_ENV = "FINANCE_CURRENCY"
REPORT_TOP_N_ENV = "FINANCE_REPORT_TOP_N"
TIME_SERIES_WORKERS_ENV = "FINANCE_TIME_SERIES_WORKERS"
LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_CURRENCY = "QAR"
DEFAULT_REPORT_TOP_N = 5
DEFAULT_TIME_SERIES_WORKERS = 1


def read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return value


def read_bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FinanceSettings:
    """Settings consumed by the financial reporting endpoints."""

    currency: str = DEFAULT_CURRENCY
    report_top_n: int = DEFAULT_REPORT_TOP_N
    time_series_workers: int = DEFAULT_TIME_SERIES_WORKERS


def load_finance_settings() -> FinanceSettings:
    currency = (os.getenv(CURRENCY_ENV) or DEFAULT_CURRENCY).strip().upper()
    if len(currency) != 3:
        raise ValueError(f"{CURRENCY_ENV} must be a three letter currency code")
    return FinanceSettings(
        currency=currency,
        report_top_n=max(read_int_env(REPORT_TOP_N_ENV, DEFAULT_REPORT_TOP_N), 1),
        time_series_workers=max(
            read_int_env(TIME_SERIES_WORKERS_ENV, DEFAULT_TIME_SERIES_WORKERS), 1
        ),
    )


def configure_logging(level: str | None = None) -> None:
    """Set the root log level from ``LOG_LEVEL`` unless handlers already exist."""

    raw_level = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    numeric_level = getattr(logging, raw_level, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=numeric_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    root_logger.setLevel(numeric_level)

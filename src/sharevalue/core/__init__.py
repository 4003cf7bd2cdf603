"""Core utilities and shared functionality."""

from sharevalue.core.timezone import (
    now_utc,
    to_utc,
    to_eastern,
    parse_datetime_utc,
    day_key,
    minute_key,
    start_of_market_day,
    market_close_utc,
    EASTERN_TZ,
    UTC,
)
from sharevalue.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    ScenarioOrderError,
    SourceError,
)
from sharevalue.core.observable import Observable, combine_latest

__all__ = [
    "now_utc",
    "to_utc",
    "to_eastern",
    "parse_datetime_utc",
    "day_key",
    "minute_key",
    "start_of_market_day",
    "market_close_utc",
    "EASTERN_TZ",
    "UTC",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ScenarioOrderError",
    "SourceError",
    "Observable",
    "combine_latest",
]

"""Timezone utilities.

Instants are stored and compared in UTC. Date keys used to deduplicate series
samples are taken in US/Eastern market time, so a trading day never straddles
two keys.
"""

from datetime import date, datetime
from typing import Optional

import pytz
from dateutil import parser as date_parser

EASTERN_TZ = pytz.timezone("US/Eastern")
UTC = pytz.UTC


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert a datetime to UTC. Naive datetimes are taken to be UTC already."""
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def to_eastern(dt: datetime) -> datetime:
    """Convert a datetime to US/Eastern timezone."""
    if dt.tzinfo is None:
        # Assume naive datetime is already Eastern
        return EASTERN_TZ.localize(dt)
    return dt.astimezone(EASTERN_TZ)


def parse_datetime_utc(value: str, default_tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Parse a datetime string and return it in UTC.

    If no timezone is provided in the string, assumes UTC (or default_tz).
    """
    dt = date_parser.parse(value)
    if dt.tzinfo is None:
        tz = default_tz or UTC
        dt = tz.localize(dt)
    return dt.astimezone(UTC)


def day_key(dt: datetime) -> str:
    """Day-granularity key in market time, e.g. '2024-06-14'."""
    return to_eastern(to_utc(dt)).strftime("%Y-%m-%d")


def minute_key(dt: datetime) -> str:
    """Minute-granularity key in market time, e.g. '2024-06-14 10:35'."""
    return to_eastern(to_utc(dt)).strftime("%Y-%m-%d %H:%M")


def start_of_market_day(dt: datetime) -> datetime:
    """Midnight US/Eastern of the day containing dt, returned in UTC."""
    local = to_eastern(to_utc(dt))
    midnight = EASTERN_TZ.localize(datetime(local.year, local.month, local.day))
    return midnight.astimezone(UTC)


def market_close_utc(day: date) -> datetime:
    """16:00 US/Eastern on day, in UTC. Daily samples are stamped at the close."""
    return EASTERN_TZ.localize(datetime(day.year, day.month, day.day, 16, 0)).astimezone(UTC)

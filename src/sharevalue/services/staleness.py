"""Staleness policy: decides whether cached data warrants a remote refresh."""

from datetime import datetime, timedelta
from typing import Optional

from sharevalue.core.timezone import now_utc, to_utc
from sharevalue.domain.models import TimeSeries

LIVE_THRESHOLD = timedelta(minutes=5)
INTRADAY_THRESHOLD = timedelta(minutes=5)
HISTORICAL_THRESHOLD = timedelta(hours=24)
LONG_RANGE_THRESHOLD = timedelta(days=7)


def is_stale(
    last_updated: Optional[datetime],
    threshold: timedelta,
    now: Optional[datetime] = None,
) -> bool:
    """True when nothing was ever fetched or the last fetch is older than threshold."""
    if last_updated is None:
        return True
    current = to_utc(now) if now is not None else now_utc()
    return current - to_utc(last_updated) > threshold


def last_point_is_fresh(
    series: TimeSeries,
    threshold: timedelta,
    now: Optional[datetime] = None,
) -> bool:
    """
    True when the newest sample itself is younger than threshold.

    Intraday series are sampled every five minutes, so polling again before the
    next sample can exist is pointless.
    """
    if not series:
        return False
    return not is_stale(series[-1].timestamp, threshold, now)

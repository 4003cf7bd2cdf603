"""Time series domain models."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sharevalue.core.timezone import parse_datetime_utc


@dataclass(frozen=True)
class TimePoint:
    """A single sample of a price or rate. Timestamps are aware UTC datetimes."""

    timestamp: datetime
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp.isoformat(), "value": self.value}

    @staticmethod
    def from_dict(data: Any) -> Optional["TimePoint"]:
        """Rebuild a point from its cached form; None if the record is unusable."""
        if not isinstance(data, dict):
            return None
        raw_ts = data.get("timestamp")
        raw_value = data.get("value")
        if not isinstance(raw_ts, str) or isinstance(raw_value, bool):
            return None
        try:
            timestamp = parse_datetime_utc(raw_ts)
            value = float(raw_value)
        except (TypeError, ValueError, OverflowError):
            return None
        if not math.isfinite(value):
            return None
        return TimePoint(timestamp=timestamp, value=value)


# Ordered ascending by timestamp; see services.series_merge for the invariant.
TimeSeries = list[TimePoint]


@dataclass(frozen=True)
class JoinedPoint:
    """A point of series A paired with its nearest neighbour in series B."""

    timestamp: datetime
    a_value: float
    b_value: float

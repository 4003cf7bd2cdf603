"""
Incremental merge of freshly fetched points into a cached series.

The result is sorted ascending by timestamp and holds at most one point per
date key. Merging is idempotent: applying the same batch twice gives the same
series as applying it once, and an empty batch changes nothing.
"""

import math
from datetime import datetime
from typing import Any, Callable, Iterable

from sharevalue.core.timezone import day_key, minute_key
from sharevalue.domain.models import TimePoint, TimeSeries

DateKeyFn = Callable[[datetime], str]

__all__ = ["merge_series", "drop_malformed", "day_key", "minute_key", "DateKeyFn"]


def merge_series(existing: TimeSeries, incoming: TimeSeries, date_key: DateKeyFn) -> TimeSeries:
    """
    Merge incoming into existing.

    A point whose date key is already present replaces the point at that
    position (last writer wins); any other point is appended. The merged list
    is then re-sorted by timestamp. Neither input is modified.
    """
    merged = list(existing)
    positions = {date_key(point.timestamp): index for index, point in enumerate(merged)}

    for point in incoming:
        key = date_key(point.timestamp)
        if key in positions:
            merged[positions[key]] = point
        else:
            positions[key] = len(merged)
            merged.append(point)

    if len(positions) != len(merged):
        # existing itself carried duplicate keys; keep the last one per key
        merged = [merged[index] for index in sorted(positions.values())]

    return sorted(merged, key=lambda point: point.timestamp)


def _is_well_formed(point: Any) -> bool:
    if not isinstance(point, TimePoint):
        return False
    if not isinstance(point.timestamp, datetime) or point.timestamp.tzinfo is None:
        return False
    if isinstance(point.value, bool) or not isinstance(point.value, (int, float)):
        return False
    if not math.isfinite(point.value):
        return False
    try:
        return point.timestamp.timestamp() >= 0
    except (OverflowError, OSError, ValueError):
        return False


def drop_malformed(points: Iterable[Any]) -> TimeSeries:
    """Keep only points with an aware, non-negative timestamp and a finite value."""
    return [point for point in points if _is_well_formed(point)]

"""
Nearest-timestamp join of two independently sampled series.

Each point of series A is paired with the point of series B whose timestamp is
closest to it. When two points of B are equally close, the one that comes
first in B wins. An empty B yields an empty join: there is no synthetic
neutral value, absence means "no valuation yet".
"""

from bisect import bisect_left
from datetime import datetime

from sharevalue.domain.models import JoinedPoint, TimeSeries


def _is_ascending(times: list[datetime]) -> bool:
    return all(earlier <= later for earlier, later in zip(times, times[1:]))


def _scan_nearest(times: list[datetime], target: datetime) -> int:
    best_index = 0
    best_distance = abs(times[0] - target)
    for index in range(1, len(times)):
        distance = abs(times[index] - target)
        if distance < best_distance:
            best_index, best_distance = index, distance
    return best_index


def _bisect_nearest(times: list[datetime], target: datetime) -> int:
    above = bisect_left(times, target)
    if above == len(times):
        return bisect_left(times, times[-1])
    if above == 0:
        return 0
    below = above - 1
    if target - times[below] <= times[above] - target:
        # first of any run of equal timestamps
        return bisect_left(times, times[below])
    return above


def join_nearest(a: TimeSeries, b: TimeSeries) -> list[JoinedPoint]:
    """
    Pair every point of a with its nearest neighbour in b.

    Runs in O(|a| log |b|) when b is ascending (the normal case for a merged
    series) and falls back to a full scan of b otherwise.
    """
    if not a or not b:
        return []

    times = [point.timestamp for point in b]
    find = _bisect_nearest if _is_ascending(times) else _scan_nearest

    joined = []
    for point in a:
        match = b[find(times, point.timestamp)]
        joined.append(
            JoinedPoint(timestamp=point.timestamp, a_value=point.value, b_value=match.value)
        )
    return joined

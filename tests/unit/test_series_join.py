"""
Unit tests for the nearest-timestamp join engine.

Tests cover:
- Degenerate inputs
- Nearest matching and tie-breaking
- Agreement between the bisect path and the full scan
"""

import random
from datetime import timedelta

from sharevalue.domain.models import JoinedPoint, TimePoint
from sharevalue.services.series_join import _bisect_nearest, _scan_nearest, join_nearest

from tests.conftest import make_series, utc_from_eastern

T0 = utc_from_eastern(2024, 6, 14, 9, 30)


def _at(minutes: int, value: float) -> TimePoint:
    return TimePoint(T0 + timedelta(minutes=minutes), value)


# =============================================================================
# DEGENERATE INPUT TESTS
# =============================================================================


class TestJoinDegenerate:
    """Tests for empty and singleton inputs."""

    def test_empty_b_yields_nothing(self):
        """
        GIVEN a price series and no rate samples
        WHEN I join them
        THEN the result is empty rather than zero-filled
        """
        a = make_series(T0, [250.0, 251.0])

        assert join_nearest(a, []) == []

    def test_empty_a_yields_nothing(self):
        assert join_nearest([], [_at(0, 0.8)]) == []

    def test_singleton_b_pairs_with_every_point(self):
        """
        GIVEN B = [(t, v)]
        WHEN I join any A with B
        THEN every point of A pairs with v
        """
        a = make_series(T0, [250.0, 251.0, 252.0])
        b = [_at(500, 0.79)]

        joined = join_nearest(a, b)

        assert [p.b_value for p in joined] == [0.79, 0.79, 0.79]
        assert [p.timestamp for p in joined] == [p.timestamp for p in a]


# =============================================================================
# NEAREST MATCH TESTS
# =============================================================================


class TestJoinNearest:
    """Tests for nearest matching semantics."""

    def test_pairs_with_closest_b_point(self):
        a = [_at(0, 250.0), _at(10, 251.0)]
        b = [_at(-1, 0.80), _at(4, 0.81), _at(9, 0.82)]

        joined = join_nearest(a, b)

        assert joined == [
            JoinedPoint(timestamp=_at(0, 0).timestamp, a_value=250.0, b_value=0.80),
            JoinedPoint(timestamp=_at(10, 0).timestamp, a_value=251.0, b_value=0.82),
        ]

    def test_tie_picks_first_in_b(self):
        """
        GIVEN two b points equally distant from an a point
        WHEN I join
        THEN the earlier one in b wins
        """
        a = [_at(5, 250.0)]
        b = [_at(0, 0.80), _at(10, 0.81)]

        assert join_nearest(a, b)[0].b_value == 0.80

    def test_equal_timestamps_in_b_pick_first(self):
        a = [_at(5, 250.0)]
        b = [_at(0, 0.70), _at(4, 0.80), _at(4, 0.90)]

        assert join_nearest(a, b)[0].b_value == 0.80

    def test_points_outside_b_range_clamp_to_ends(self):
        a = [_at(-100, 1.0), _at(100, 2.0)]
        b = [_at(0, 0.80), _at(5, 0.81)]

        assert [p.b_value for p in join_nearest(a, b)] == [0.80, 0.81]

    def test_unsorted_b_uses_scan(self):
        """
        GIVEN b out of timestamp order
        WHEN I join
        THEN the first minimum in b's own order wins
        """
        a = [_at(5, 250.0)]
        b = [_at(10, 0.81), _at(0, 0.80)]

        assert join_nearest(a, b)[0].b_value == 0.81

    def test_bisect_agrees_with_scan(self):
        """
        GIVEN random ascending b timestamps (with repeats)
        WHEN I look up random targets
        THEN the bisect search picks the same index as the full scan
        """
        rng = random.Random(1234)
        for _ in range(50):
            offsets = sorted(rng.randint(0, 60) for _ in range(rng.randint(1, 12)))
            times = [T0 + timedelta(minutes=m) for m in offsets]
            for _ in range(20):
                target = T0 + timedelta(minutes=rng.randint(-10, 70))
                assert _bisect_nearest(times, target) == _scan_nearest(times, target)

"""Stub quote and rate sources for offline/testing use."""

import random
from datetime import date, datetime, timedelta
from typing import Callable

from sharevalue.core.timezone import market_close_utc, now_utc, start_of_market_day, to_utc
from sharevalue.domain.models import TimePoint, TimeSeries

INTRADAY_STEP = timedelta(minutes=5)


class _StubSeriesSource:
    """
    Deterministic noise around a base value.

    The value for a given timestamp depends only on the seed and the timestamp,
    so repeated fetches agree with each other.
    """

    def __init__(
        self,
        base_value: float,
        volatility: float,
        seed: int = 42,
        clock: Callable[[], datetime] = now_utc,
        decimals: int = 2,
    ):
        self._base = base_value
        self._volatility = volatility
        self._seed = seed
        self._clock = clock
        self._decimals = decimals

    def _value_at(self, timestamp: datetime) -> float:
        rng = random.Random(f"{self._seed}:{int(timestamp.timestamp())}")
        drift = (rng.random() - 0.5) * 2 * self._volatility
        return round(self._base * (1 + drift), self._decimals)

    def get_current_price(self) -> float:
        return self._value_at(self._clock().replace(second=0, microsecond=0))

    def get_intraday(self, since: datetime) -> TimeSeries:
        now = to_utc(self._clock())
        start = max(to_utc(since), start_of_market_day(now))
        # align to the five-minute grid
        offset = (start - start_of_market_day(start)) % INTRADAY_STEP
        if offset:
            start += INTRADAY_STEP - offset
        points = []
        timestamp = start
        while timestamp <= now:
            points.append(TimePoint(timestamp=timestamp, value=self._value_at(timestamp)))
            timestamp += INTRADAY_STEP
        return points

    def get_historical(self, from_date: date, to_date: date) -> TimeSeries:
        points = []
        day = from_date
        while day <= to_date:
            if day.weekday() < 5:
                timestamp = market_close_utc(day)
                points.append(TimePoint(timestamp=timestamp, value=self._value_at(timestamp)))
            day += timedelta(days=1)
        return points


class StubQuoteSource(_StubSeriesSource):
    """Stub share price source with deterministic fake data."""

    def __init__(
        self,
        base_price: float = 250.0,
        seed: int = 42,
        clock: Callable[[], datetime] = now_utc,
    ):
        super().__init__(base_price, volatility=0.03, seed=seed, clock=clock, decimals=2)


class StubRateSource(_StubSeriesSource):
    """Stub USD/GBP rate source with deterministic fake data."""

    def __init__(
        self,
        base_rate: float = 0.80,
        seed: int = 7,
        clock: Callable[[], datetime] = now_utc,
    ):
        super().__init__(base_rate, volatility=0.01, seed=seed, clock=clock, decimals=5)

"""
Pytest configuration and fixtures for share value tracker tests.

This module provides:
- Time helpers and a controllable clock
- In-memory SQLite database fixtures
- Key-value store fixtures (SQLite-backed and always-failing)
- Deterministic, failing and malformed quote/rate sources
- Engine context and API test client fixtures
"""

import asyncio
from datetime import date, datetime, timedelta
from itertools import count
from typing import Any, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from sharevalue.main import app
from sharevalue.app_context import AppContext, set_app_context
from sharevalue.repositories.sqlalchemy.database import Base, reset_database
# Import ORM models to register them with Base before creating tables
from sharevalue.repositories.sqlalchemy import orm_models  # noqa: F401
from sharevalue.repositories.sqlalchemy import SqlAlchemyKeyValueStore
from sharevalue.services import CacheStore
from sharevalue.domain.models import TimePoint, TimeSeries
from sharevalue.core.timezone import EASTERN_TZ, market_close_utc, to_eastern, to_utc
from sharevalue.config.settings import Settings, reset_settings, set_settings


# =============================================================================
# TIME HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


def utc_from_eastern(*args, **kwargs) -> datetime:
    """Eastern wall-clock time converted to an aware UTC datetime."""
    return to_utc(eastern_datetime(*args, **kwargs))


class FakeClock:
    """Callable clock whose time only moves when the test says so."""

    def __init__(self, now: datetime):
        self.now = to_utc(now)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' for deterministic tests: Friday 2024-06-14 14:30 ET."""
    return utc_from_eastern(2024, 6, 14, 14, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    """Provide a controllable clock starting at fixed_now."""
    return FakeClock(fixed_now)


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


# =============================================================================
# SERIES HELPERS
# =============================================================================


def make_series(
    start: datetime,
    values: list[float],
    step: timedelta = timedelta(minutes=5),
) -> TimeSeries:
    """Evenly spaced points starting at start."""
    start = to_utc(start)
    return [TimePoint(timestamp=start + step * i, value=v) for i, v in enumerate(values)]


def make_daily_series(days: list[date], values: list[float]) -> TimeSeries:
    """One point per day, stamped at the market close."""
    return [TimePoint(timestamp=market_close_utc(d), value=v) for d, v in zip(days, values)]


def weekdays_before(end: date, n: int) -> list[date]:
    """The n weekdays up to and including end, oldest first."""
    days = []
    day = end
    while len(days) < n:
        if day.weekday() < 5:
            days.append(day)
        day -= timedelta(days=1)
    return list(reversed(days))


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


class FailingKeyValueStore:
    """Key-value store whose every operation fails, like a full or locked disk."""

    def get(self, key: str) -> Optional[str]:
        raise OSError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")

    def delete(self, key: str) -> None:
        raise OSError("storage unavailable")


@pytest.fixture
def kv_store(test_session) -> SqlAlchemyKeyValueStore:
    """Provide SQLite-backed KeyValueStore."""
    return SqlAlchemyKeyValueStore(test_session)


@pytest.fixture
def cache_store(kv_store) -> CacheStore:
    """Provide CacheStore over the test database."""
    return CacheStore(kv_store)


@pytest.fixture
def failing_cache_store() -> CacheStore:
    """Provide CacheStore whose storage always fails."""
    return CacheStore(FailingKeyValueStore())


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


class DeterministicSource:
    """
    Quote/rate source returning fixed data.

    Every call is recorded in `calls` so tests can count remote requests.
    """

    def __init__(
        self,
        current: float,
        intraday: Optional[TimeSeries] = None,
        historical: Optional[TimeSeries] = None,
    ):
        self.current = current
        self.intraday = intraday or []
        self.historical = historical or []
        self.calls: list[tuple] = []

    def get_current_price(self) -> float:
        self.calls.append(("current",))
        return self.current

    def get_intraday(self, since: datetime) -> TimeSeries:
        self.calls.append(("intraday", since))
        return [p for p in self.intraday if p.timestamp >= since]

    def get_historical(self, from_date: date, to_date: date) -> TimeSeries:
        self.calls.append(("historical", from_date, to_date))
        return [
            p for p in self.historical
            if from_date <= to_eastern(p.timestamp).date() <= to_date
        ]

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


class FailingSource:
    """Source that always raises, like an unreachable provider."""

    def __init__(self):
        self.calls = count()

    def get_current_price(self) -> float:
        next(self.calls)
        raise ConnectionError("Network unavailable")

    def get_intraday(self, since: datetime) -> TimeSeries:
        next(self.calls)
        raise ConnectionError("Network unavailable")

    def get_historical(self, from_date: date, to_date: date) -> TimeSeries:
        next(self.calls)
        raise ConnectionError("Network unavailable")


class MalformedSource:
    """Source that answers with payloads of the wrong shape."""

    def __init__(self, current: Any = "n/a", series: Any = None):
        self._current = current
        self._series = series if series is not None else {"error": "rate limited"}

    def get_current_price(self) -> Any:
        return self._current

    def get_intraday(self, since: datetime) -> Any:
        return self._series

    def get_historical(self, from_date: date, to_date: date) -> Any:
        return self._series


@pytest.fixture
def intraday_prices() -> TimeSeries:
    """Five-minute TSLA samples from the open on 2024-06-14."""
    return make_series(
        eastern_datetime(2024, 6, 14, 9, 30),
        [250.0, 250.5, 251.0, 250.75, 251.25, 252.0],
    )


@pytest.fixture
def intraday_rates() -> TimeSeries:
    """USD/GBP samples offset by two minutes from the price samples."""
    return make_series(
        eastern_datetime(2024, 6, 14, 9, 32),
        [0.80, 0.801, 0.802, 0.801, 0.80, 0.799],
    )


@pytest.fixture
def historical_days(fixed_now) -> list[date]:
    """Last five weekdays before the fixed date."""
    return weekdays_before(to_eastern(fixed_now).date() - timedelta(days=1), 5)


@pytest.fixture
def quote_source(intraday_prices, historical_days) -> DeterministicSource:
    """Provide deterministic share price source (current price 250.0)."""
    return DeterministicSource(
        current=250.0,
        intraday=intraday_prices,
        historical=make_daily_series(historical_days, [240.0, 242.0, 245.0, 244.0, 248.0]),
    )


@pytest.fixture
def rate_source(intraday_rates, historical_days) -> DeterministicSource:
    """Provide deterministic USD/GBP source (current rate 0.80)."""
    return DeterministicSource(
        current=0.80,
        intraday=intraday_rates,
        historical=make_daily_series(historical_days, [0.79, 0.79, 0.80, 0.80, 0.81]),
    )


@pytest.fixture
def failing_source() -> FailingSource:
    """Provide a source that always fails."""
    return FailingSource()


# =============================================================================
# ENGINE FIXTURES
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: stub provider and an in-memory database."""
    return Settings(provider="stub", database_url="sqlite:///:memory:", log_level="DEBUG")


@pytest.fixture
def scenario_ids():
    """Predictable scenario ids: scenario-1, scenario-2, ..."""
    counter = count(1)
    return lambda: f"scenario-{next(counter)}"


@pytest.fixture
def app_context(settings, kv_store, quote_source, rate_source, clock, scenario_ids) -> AppContext:
    """Provide an engine context over the test database and deterministic sources."""
    context = AppContext(
        settings=settings,
        store=kv_store,
        quote_source=quote_source,
        rate_source=rate_source,
        clock=clock,
        id_factory=scenario_ids,
    )
    yield context
    context.close()


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(settings, app_context) -> TestClient:
    """Provide FastAPI test client serving the test engine context."""
    set_settings(settings)
    set_app_context(app_context)
    with TestClient(app) as c:
        yield c
    set_app_context(None)
    reset_settings()
    reset_database()

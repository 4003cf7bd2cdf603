"""
Synchronization units: one per market data stream.

A unit owns the last known value of its stream, decides (through the
staleness policy) whether a remote call is warranted, and on completion
updates its in-memory state, the persistent cache and its reactive stream.

Lifecycle of one refresh:

    IDLE -> FETCHING -> UPDATED | FELL_BACK_TO_CACHE | FELL_BACK_TO_DEFAULT -> IDLE

Every terminal transition publishes exactly one value on the stream, so
consumers never wait for "the good value". Remote calls are blocking source
methods run with asyncio.to_thread; all state changes happen on the event
loop thread. If two calls for one unit overlap, the last to complete wins.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Generic, Optional, TypeVar

from dateutil.relativedelta import relativedelta

from sharevalue.config.settings import Settings
from sharevalue.core.observable import Observable
from sharevalue.core.timezone import (
    day_key,
    market_close_utc,
    minute_key,
    now_utc,
    start_of_market_day,
    to_eastern,
)
from sharevalue.domain.models import DataKind, SyncOutcome, SyncPhase, SyncState, TimeSeries
from sharevalue.providers.market_data_provider import QuoteSource, RateSource
from sharevalue.services.cache_store import CacheStore
from sharevalue.services.series_merge import DateKeyFn, drop_malformed, merge_series
from sharevalue.services.staleness import (
    HISTORICAL_THRESHOLD,
    INTRADAY_THRESHOLD,
    LIVE_THRESHOLD,
    LONG_RANGE_THRESHOLD,
    is_stale,
    last_point_is_fresh,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")


class InvalidPayloadError(ValueError):
    """A source answered, but not with something the unit can use."""


@dataclass(frozen=True)
class FetchRequest:
    """A prepared remote call plus what the unit needs to know about it afterwards."""

    call: Callable[[], Any]
    full_range: bool = False


class SyncUnit(Generic[V]):
    """Base class holding the fetch / cache / fallback lifecycle."""

    def __init__(
        self,
        kind: DataKind,
        cache: CacheStore,
        threshold: timedelta,
        default: V,
        clock: Callable[[], datetime] = now_utc,
        fetch_timeout: float = 10.0,
    ):
        self._kind = kind
        self._cache = cache
        self._value_key = cache.keys.value_key(kind)
        self._updated_key = cache.keys.updated_key(kind)
        self._threshold = threshold
        self._default = default
        self._clock = clock
        self._fetch_timeout = fetch_timeout
        self._inflight: Optional[asyncio.Task] = None
        self._closed = False

        cached = self._load_cached()
        if cached is not None:
            self._state: SyncState[V] = SyncState(
                current_value=cached,
                last_updated=self._cache.get_timestamp(self._updated_key),
            )
        else:
            self._state = SyncState(current_value=self._copy(default))
        self._stream: Observable[V] = Observable(self._copy(self._state.current_value), name=kind.value)

    # Accessors

    @property
    def kind(self) -> DataKind:
        return self._kind

    @property
    def stream(self) -> Observable[V]:
        return self._stream

    @property
    def value(self) -> V:
        return self._copy(self._state.current_value)

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._state.last_updated

    @property
    def state(self) -> SyncState[V]:
        """Snapshot of the unit's state."""
        return replace(self._state, current_value=self._copy(self._state.current_value))

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        return is_stale(self._state.last_updated, self._threshold, now or self._clock())

    # Refresh

    def request_refresh(
        self, force: bool = False, slack: timedelta = timedelta(0)
    ) -> Optional[asyncio.Task]:
        """
        Start a refresh if one is warranted and return immediately.

        Returns None when the data is fresh (and force is False) or the unit is
        closed; otherwise the task running the fetch. A fetch already in flight
        is reused unless force is set. slack moves the staleness check that far
        into the future, so a periodic trigger firing exactly one threshold
        after the last request still refreshes. Must be called from the event
        loop.
        """
        if self._closed:
            return None
        if not force and self._inflight is not None and not self._inflight.done():
            return self._inflight
        now = self._clock()
        if not force and not self.is_stale(now + slack):
            return None
        task = asyncio.get_running_loop().create_task(
            self._run(now), name=f"refresh-{self._kind.value}"
        )
        self._inflight = task
        return task

    async def refresh(self, force: bool = False) -> Optional[SyncOutcome]:
        """Awaitable form of request_refresh: the outcome, or None if nothing ran."""
        task = self.request_refresh(force=force)
        if task is None:
            return None
        return await task

    def close(self) -> None:
        """Stop listening; in-flight results are discarded when they arrive."""
        self._closed = True
        self._stream.dispose()

    async def _run(self, now: datetime) -> Optional[SyncOutcome]:
        request = self._build_request(now)
        self._state.loading = True
        self._state.phase = SyncPhase.FETCHING
        try:
            payload = await asyncio.wait_for(
                asyncio.to_thread(request.call), timeout=self._fetch_timeout
            )
            incoming = self._validate(payload)
        except asyncio.CancelledError:
            self._finish()
            raise
        except Exception as exc:
            if self._closed:
                self._finish()
                return None
            return self._fall_back(exc)
        if self._closed:
            self._finish()
            return None
        return self._apply(incoming, request, now)

    def _apply(self, incoming: V, request: FetchRequest, now: datetime) -> SyncOutcome:
        # staleness is measured from when the request started, not when it finished
        value = self._combine(self._state.current_value, incoming, now)
        self._state.current_value = value
        self._state.last_updated = now
        self._persist(value)
        self._cache.set_timestamp(self._updated_key, now)
        self._on_updated(request, now)
        logger.info("Refreshed %s", self._kind.value)
        return self._complete(SyncOutcome.UPDATED)

    def _fall_back(self, reason: Exception) -> SyncOutcome:
        cached = self._load_cached()
        if cached is None and self._state.last_updated is not None:
            # storage is unavailable but this session already fetched a value
            cached = self._state.current_value
        if cached is not None:
            logger.warning(
                "Refresh of %s failed (%s: %s); using cached value",
                self._kind.value, type(reason).__name__, reason,
            )
            self._state.current_value = cached
            return self._complete(SyncOutcome.FELL_BACK_TO_CACHE)

        logger.error(
            "Refresh of %s failed (%s: %s) and nothing is cached; using default",
            self._kind.value, type(reason).__name__, reason,
        )
        self._state.current_value = self._copy(self._default)
        return self._complete(SyncOutcome.FELL_BACK_TO_DEFAULT)

    def _complete(self, outcome: SyncOutcome) -> SyncOutcome:
        self._state.last_outcome = outcome
        self._finish()
        self._stream.publish(self._copy(self._state.current_value))
        return outcome

    def _finish(self) -> None:
        self._state.loading = False
        self._state.phase = SyncPhase.IDLE

    # Hooks

    def _build_request(self, now: datetime) -> FetchRequest:
        raise NotImplementedError

    def _validate(self, payload: Any) -> V:
        raise NotImplementedError

    def _combine(self, current: V, incoming: V, now: datetime) -> V:
        return incoming

    def _on_updated(self, request: FetchRequest, now: datetime) -> None:
        pass

    def _load_cached(self) -> Optional[V]:
        raise NotImplementedError

    def _persist(self, value: V) -> None:
        raise NotImplementedError

    def _copy(self, value: V) -> V:
        return value


class ScalarSyncUnit(SyncUnit[float]):
    """Current price or current rate."""

    def __init__(
        self,
        kind: DataKind,
        fetch: Callable[[], float],
        cache: CacheStore,
        default: float,
        threshold: timedelta = LIVE_THRESHOLD,
        clock: Callable[[], datetime] = now_utc,
        fetch_timeout: float = 10.0,
    ):
        self._fetch = fetch
        super().__init__(kind, cache, threshold, default, clock=clock, fetch_timeout=fetch_timeout)

    def _build_request(self, now: datetime) -> FetchRequest:
        return FetchRequest(call=self._fetch)

    def _validate(self, payload: Any) -> float:
        if isinstance(payload, bool) or not isinstance(payload, (int, float)):
            raise InvalidPayloadError(f"expected a number, got {type(payload).__name__}")
        value = float(payload)
        if not math.isfinite(value) or value <= 0:
            raise InvalidPayloadError(f"unusable value {payload!r}")
        return value

    def _load_cached(self) -> Optional[float]:
        return self._cache.get_float(self._value_key)

    def _persist(self, value: float) -> None:
        self._cache.set_json(self._value_key, value)


class SeriesSyncUnit(SyncUnit[TimeSeries]):
    """Base for series streams: validates, merges and trims fetched batches."""

    def __init__(
        self,
        kind: DataKind,
        cache: CacheStore,
        date_key: DateKeyFn,
        threshold: timedelta,
        clock: Callable[[], datetime] = now_utc,
        fetch_timeout: float = 10.0,
    ):
        self._date_key = date_key
        super().__init__(kind, cache, threshold, [], clock=clock, fetch_timeout=fetch_timeout)

    def _retention_start(self, now: datetime) -> datetime:
        """Points older than this are dropped from the series."""
        raise NotImplementedError

    def _trim(self, series: TimeSeries, now: datetime) -> TimeSeries:
        cutoff = self._retention_start(now)
        return [point for point in series if point.timestamp >= cutoff]

    def _validate(self, payload: Any) -> TimeSeries:
        if not isinstance(payload, (list, tuple)):
            raise InvalidPayloadError(f"expected a series, got {type(payload).__name__}")
        points = drop_malformed(payload)
        if payload and not points:
            raise InvalidPayloadError("no usable points in batch")
        if len(points) != len(payload):
            logger.warning(
                "Dropped %d malformed point(s) from %s batch",
                len(payload) - len(points), self._kind.value,
            )
        return points

    def _combine(self, current: TimeSeries, incoming: TimeSeries, now: datetime) -> TimeSeries:
        return self._trim(merge_series(current, incoming, self._date_key), now)

    def _load_cached(self) -> Optional[TimeSeries]:
        series = self._cache.get_series(self._value_key)
        if series is None:
            return None
        return self._trim(merge_series([], series, self._date_key), self._clock())

    def _persist(self, value: TimeSeries) -> None:
        self._cache.set_series(self._value_key, value)

    def _copy(self, value: TimeSeries) -> TimeSeries:
        return list(value)


class IntradaySyncUnit(SeriesSyncUnit):
    """Five-minute samples for the current market day."""

    def __init__(
        self,
        kind: DataKind,
        fetch: Callable[[datetime], TimeSeries],
        cache: CacheStore,
        threshold: timedelta = INTRADAY_THRESHOLD,
        clock: Callable[[], datetime] = now_utc,
        fetch_timeout: float = 10.0,
    ):
        self._fetch = fetch
        super().__init__(kind, cache, minute_key, threshold, clock=clock, fetch_timeout=fetch_timeout)

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        now = now or self._clock()
        if last_point_is_fresh(self._state.current_value, self._threshold, now):
            return False
        return super().is_stale(now)

    def _retention_start(self, now: datetime) -> datetime:
        return start_of_market_day(now)

    def _build_request(self, now: datetime) -> FetchRequest:
        since = start_of_market_day(now)
        series = self._state.current_value
        if series and series[-1].timestamp > since:
            since = series[-1].timestamp
        fetch = self._fetch
        return FetchRequest(call=lambda: fetch(since))


class HistoricalSyncUnit(SeriesSyncUnit):
    """
    One sample per day over a multi-year window.

    Normally only the days since the newest cached point are fetched. Once the
    last full-range fetch is older than the long-range threshold, the whole
    window is fetched again so corrected closes replace cached ones.
    """

    def __init__(
        self,
        kind: DataKind,
        fetch: Callable[[date, date], TimeSeries],
        cache: CacheStore,
        history_years: int = 2,
        threshold: timedelta = HISTORICAL_THRESHOLD,
        long_range_threshold: timedelta = LONG_RANGE_THRESHOLD,
        clock: Callable[[], datetime] = now_utc,
        fetch_timeout: float = 10.0,
    ):
        self._fetch = fetch
        self._history_years = history_years
        self._long_range_threshold = long_range_threshold
        super().__init__(kind, cache, day_key, threshold, clock=clock, fetch_timeout=fetch_timeout)
        self._revalidated_key = cache.keys.revalidated_key(kind)
        self._last_revalidated = cache.get_timestamp(self._revalidated_key)

    @property
    def last_revalidated(self) -> Optional[datetime]:
        return self._last_revalidated

    def _window_start(self, now: datetime) -> date:
        return to_eastern(now).date() - relativedelta(years=self._history_years)

    def _retention_start(self, now: datetime) -> datetime:
        return start_of_market_day(market_close_utc(self._window_start(now)))

    def _build_request(self, now: datetime) -> FetchRequest:
        today = to_eastern(now).date()
        series = self._state.current_value
        full_range = not series or is_stale(self._last_revalidated, self._long_range_threshold, now)
        if full_range:
            from_date = self._window_start(now)
        else:
            # re-fetch the newest cached day so a provisional close gets corrected
            from_date = to_eastern(series[-1].timestamp).date()
        fetch = self._fetch
        return FetchRequest(call=lambda: fetch(from_date, today), full_range=full_range)

    def _on_updated(self, request: FetchRequest, now: datetime) -> None:
        if request.full_range:
            self._last_revalidated = now
            self._cache.set_timestamp(self._revalidated_key, now)


def create_sync_units(
    settings: Settings,
    quote_source: QuoteSource,
    rate_source: RateSource,
    cache: CacheStore,
    clock: Callable[[], datetime] = now_utc,
) -> dict[DataKind, SyncUnit]:
    """Build the six units of one engine session."""
    live = timedelta(seconds=settings.live_refresh_seconds)
    historical = timedelta(seconds=settings.historical_refresh_seconds)
    long_range = timedelta(seconds=settings.long_range_revalidate_seconds)
    timeout = settings.fetch_timeout_seconds

    return {
        DataKind.CURRENT_PRICE: ScalarSyncUnit(
            DataKind.CURRENT_PRICE, quote_source.get_current_price, cache,
            default=settings.default_price, threshold=live, clock=clock, fetch_timeout=timeout,
        ),
        DataKind.CURRENT_RATE: ScalarSyncUnit(
            DataKind.CURRENT_RATE, rate_source.get_current_price, cache,
            default=settings.default_rate, threshold=live, clock=clock, fetch_timeout=timeout,
        ),
        DataKind.INTRADAY_PRICE: IntradaySyncUnit(
            DataKind.INTRADAY_PRICE, quote_source.get_intraday, cache,
            threshold=live, clock=clock, fetch_timeout=timeout,
        ),
        DataKind.INTRADAY_RATE: IntradaySyncUnit(
            DataKind.INTRADAY_RATE, rate_source.get_intraday, cache,
            threshold=live, clock=clock, fetch_timeout=timeout,
        ),
        DataKind.HISTORICAL_PRICE: HistoricalSyncUnit(
            DataKind.HISTORICAL_PRICE, quote_source.get_historical, cache,
            history_years=settings.history_years, threshold=historical,
            long_range_threshold=long_range, clock=clock, fetch_timeout=timeout,
        ),
        DataKind.HISTORICAL_RATE: HistoricalSyncUnit(
            DataKind.HISTORICAL_RATE, rate_source.get_historical, cache,
            history_years=settings.history_years, threshold=historical,
            long_range_threshold=long_range, clock=clock, fetch_timeout=timeout,
        ),
    }

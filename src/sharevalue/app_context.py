"""Application context: one valuation engine per session.

Wires the cache store, the synchronization units, the refresh coordinator,
the valuation graph and the user-owned state together, and exposes the
streams and commands the presentation layer uses.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from sharevalue.config.settings import Settings, get_settings
from sharevalue.core.observable import Observable, combine_latest
from sharevalue.core.timezone import now_utc
from sharevalue.domain.models import DataKind, SyncOutcome, SyncState, TimeSeries, WhatIfScenario
from sharevalue.domain.views import DerivedValuation, ValuationPoint
from sharevalue.providers import (
    QuoteSource,
    RateSource,
    StubQuoteSource,
    StubRateSource,
    YFinanceQuoteSource,
    YFinanceRateSource,
)
from sharevalue.repositories.protocols import KeyValueStore
from sharevalue.repositories.sqlalchemy import SqlAlchemyKeyValueStore, get_session
from sharevalue.services import (
    CacheKeys,
    CacheStore,
    RefreshCoordinator,
    ScenarioStore,
    ShareHolding,
    SyncUnit,
    ValuationGraph,
    create_sync_units,
)
from sharevalue.services.scenario_store import new_scenario_id

logger = logging.getLogger(__name__)

LIVE_KINDS = tuple(kind for kind in DataKind if kind.is_live)
HISTORICAL_KINDS = tuple(kind for kind in DataKind if not kind.is_live)


def create_sources(settings: Settings) -> tuple[QuoteSource, RateSource]:
    """Build the quote and rate sources named by settings.provider."""
    if settings.provider == "stub":
        return StubQuoteSource(), StubRateSource()
    if settings.provider == "yfinance":
        return (
            YFinanceQuoteSource(settings.symbol),
            YFinanceRateSource(settings.base_currency, settings.quote_currency),
        )
    raise ValueError(f"Unknown provider: {settings.provider}")


class AppContext:
    """
    Engine context for one application session.

    Nothing here is a process-wide singleton except the optional global
    accessor at the bottom of this module; tests build their own contexts
    with in-memory storage and deterministic sources.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[KeyValueStore] = None,
        quote_source: Optional[QuoteSource] = None,
        rate_source: Optional[RateSource] = None,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = new_scenario_id,
    ):
        """
        Build the engine.

        Args:
            settings: Settings to use. Defaults to the global settings.
            store: Raw key-value store. Defaults to the SQLite cache table.
            quote_source: Share price source. Defaults to settings.provider.
            rate_source: Exchange rate source. Defaults to settings.provider.
            clock: Returns the current aware UTC time.
            id_factory: Generates scenario ids.
        """
        self._settings = settings or get_settings()
        self._session = None
        if store is None:
            self._session = get_session()
            store = SqlAlchemyKeyValueStore(self._session)
        if quote_source is None or rate_source is None:
            default_quote, default_rate = create_sources(self._settings)
            quote_source = quote_source or default_quote
            rate_source = rate_source or default_rate

        self._cache = CacheStore(store, CacheKeys(self._settings.cache_namespace))
        self._units = create_sync_units(self._settings, quote_source, rate_source, self._cache, clock)
        self._coordinator = RefreshCoordinator(
            live_units=[self._units[kind] for kind in LIVE_KINDS],
            historical_units=[self._units[kind] for kind in HISTORICAL_KINDS],
            live_interval_seconds=self._settings.live_refresh_seconds,
            historical_interval_seconds=self._settings.historical_refresh_seconds,
        )
        self._holding = ShareHolding(self._cache)
        self._scenarios = ScenarioStore(self._cache, clock=clock, id_factory=id_factory)
        self._graph = ValuationGraph(
            current_price=self._units[DataKind.CURRENT_PRICE].stream,
            current_rate=self._units[DataKind.CURRENT_RATE].stream,
            intraday_price=self._units[DataKind.INTRADAY_PRICE].stream,
            intraday_rate=self._units[DataKind.INTRADAY_RATE].stream,
            historical_price=self._units[DataKind.HISTORICAL_PRICE].stream,
            historical_rate=self._units[DataKind.HISTORICAL_RATE].stream,
            shares=self._holding.stream,
            scenarios=self._scenarios.scenarios,
        )
        self._last_updated: Observable[Optional[datetime]] = combine_latest(
            [self.current_price, self.current_rate],
            lambda _price, _rate: self._latest_update(),
            name="last_updated",
        )
        self._closed = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._coordinator

    @property
    def graph(self) -> ValuationGraph:
        return self._graph

    @property
    def holding(self) -> ShareHolding:
        return self._holding

    @property
    def scenario_store(self) -> ScenarioStore:
        return self._scenarios

    def unit(self, kind: DataKind) -> SyncUnit:
        return self._units[kind]

    def unit_states(self) -> dict[DataKind, SyncState]:
        """Snapshot of every unit's sync state."""
        return {kind: unit.state for kind, unit in self._units.items()}

    def _latest_update(self) -> Optional[datetime]:
        stamps = [
            self._units[kind].last_updated
            for kind in (DataKind.CURRENT_PRICE, DataKind.CURRENT_RATE)
            if self._units[kind].last_updated is not None
        ]
        return max(stamps) if stamps else None

    # Streams

    @property
    def current_price(self) -> Observable[float]:
        return self._units[DataKind.CURRENT_PRICE].stream

    @property
    def current_rate(self) -> Observable[float]:
        return self._units[DataKind.CURRENT_RATE].stream

    @property
    def current_valuation(self) -> Observable[DerivedValuation]:
        return self._graph.current

    @property
    def current_usd(self) -> Observable[float]:
        return self._graph.current_usd

    @property
    def current_gbp(self) -> Observable[float]:
        return self._graph.current_gbp

    @property
    def shares(self) -> Observable[int]:
        return self._holding.stream

    @property
    def is_online(self) -> Observable[bool]:
        return self._coordinator.is_online

    @property
    def last_updated(self) -> Observable[Optional[datetime]]:
        return self._last_updated

    @property
    def intraday_price(self) -> Observable[TimeSeries]:
        return self._units[DataKind.INTRADAY_PRICE].stream

    @property
    def intraday_rate(self) -> Observable[TimeSeries]:
        return self._units[DataKind.INTRADAY_RATE].stream

    @property
    def daily_series(self) -> Observable[list[ValuationPoint]]:
        return self._graph.daily_series

    @property
    def historical_series(self) -> Observable[list[ValuationPoint]]:
        return self._graph.historical_series

    @property
    def scenario_list(self) -> Observable[list[WhatIfScenario]]:
        return self._scenarios.scenarios

    def scenario_valuation(self, scenario_id: str) -> Observable[DerivedValuation]:
        return self._graph.valuation_for(scenario_id)

    # Commands

    def set_shares(self, shares: int) -> int:
        return self._holding.set_shares(shares)

    def add_scenario(self) -> WhatIfScenario:
        return self._scenarios.add()

    def delete_scenario(self, scenario_id: str) -> None:
        self._scenarios.delete(scenario_id)

    def update_scenario(self, scenario: WhatIfScenario) -> WhatIfScenario:
        return self._scenarios.update(scenario)

    def reorder_scenarios(self, scenario_ids: list[str]) -> list[WhatIfScenario]:
        return self._scenarios.reorder(scenario_ids)

    def clear_user_data(self) -> None:
        """Forget the share count and every scenario."""
        self._holding.clear()
        self._scenarios.clear()

    def force_refresh_all(self) -> list[asyncio.Task]:
        """Refresh every unit regardless of staleness; returns immediately."""
        return self._coordinator.force_refresh_all()

    async def refresh_all(self) -> dict[DataKind, Optional[SyncOutcome]]:
        """Force a refresh of every unit and wait for the outcomes."""
        tasks = self.force_refresh_all()
        await asyncio.gather(*tasks)
        return {kind: unit.state.last_outcome for kind, unit in self._units.items()}

    # Signals

    def notify_visibility(self, visible: bool) -> list[asyncio.Task]:
        return self._coordinator.notify_visibility(visible)

    def notify_focus(self, focused: bool) -> list[asyncio.Task]:
        return self._coordinator.notify_focus(focused)

    def set_online(self, online: bool) -> list[asyncio.Task]:
        return self._coordinator.set_online(online)

    # Lifecycle

    def start(self) -> list[asyncio.Task]:
        """Start periodic refreshes. Must be called from the event loop."""
        logger.info(
            "Starting valuation engine for %s in %s",
            self._settings.symbol, self._settings.rate_pair,
        )
        return self._coordinator.start()

    async def stop(self) -> None:
        await self._coordinator.stop()

    def close(self) -> None:
        """Release resources. Results of in-flight fetches are discarded."""
        if self._closed:
            return
        self._closed = True
        for unit in self._units.values():
            unit.close()
        self._last_updated.dispose()
        self._graph.dispose()
        if self._session:
            self._session.close()
            self._session = None


# Global application context (one per process when served over HTTP)
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set (or clear, with None) the global application context."""
    global _app_context
    _app_context = context

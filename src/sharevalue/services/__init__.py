"""Service layer - synchronization, valuation and user-owned state."""

from sharevalue.services.cache_store import CacheKeys, CacheStore
from sharevalue.services.staleness import (
    LIVE_THRESHOLD,
    INTRADAY_THRESHOLD,
    HISTORICAL_THRESHOLD,
    LONG_RANGE_THRESHOLD,
    is_stale,
    last_point_is_fresh,
)
from sharevalue.services.series_merge import merge_series, drop_malformed
from sharevalue.services.series_join import join_nearest
from sharevalue.services.sync_unit import (
    SyncUnit,
    ScalarSyncUnit,
    IntradaySyncUnit,
    HistoricalSyncUnit,
    create_sync_units,
)
from sharevalue.services.refresh_coordinator import RefreshCoordinator
from sharevalue.services.valuation_graph import ValuationGraph
from sharevalue.services.scenario_store import ScenarioStore
from sharevalue.services.share_holding import ShareHolding

__all__ = [
    "CacheKeys",
    "CacheStore",
    "LIVE_THRESHOLD",
    "INTRADAY_THRESHOLD",
    "HISTORICAL_THRESHOLD",
    "LONG_RANGE_THRESHOLD",
    "is_stale",
    "last_point_is_fresh",
    "merge_series",
    "drop_malformed",
    "join_nearest",
    "SyncUnit",
    "ScalarSyncUnit",
    "IntradaySyncUnit",
    "HistoricalSyncUnit",
    "create_sync_units",
    "RefreshCoordinator",
    "ValuationGraph",
    "ScenarioStore",
    "ShareHolding",
]

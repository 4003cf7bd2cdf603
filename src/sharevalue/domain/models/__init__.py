"""Domain models package."""

from sharevalue.domain.models.enums import DataKind, SyncPhase, SyncOutcome
from sharevalue.domain.models.time_series import TimePoint, TimeSeries, JoinedPoint
from sharevalue.domain.models.scenario import WhatIfScenario
from sharevalue.domain.models.sync_state import SyncState

__all__ = [
    "DataKind",
    "SyncPhase",
    "SyncOutcome",
    "TimePoint",
    "TimeSeries",
    "JoinedPoint",
    "WhatIfScenario",
    "SyncState",
]

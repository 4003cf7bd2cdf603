"""Domain layer - pure models with no I/O."""

from sharevalue.domain.models import (
    DataKind,
    SyncPhase,
    SyncOutcome,
    TimePoint,
    TimeSeries,
    JoinedPoint,
    WhatIfScenario,
    SyncState,
)

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

"""Synchronization state model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Optional, TypeVar

from sharevalue.domain.models.enums import SyncOutcome, SyncPhase

V = TypeVar("V")


@dataclass
class SyncState(Generic[V]):
    """
    Last known value of one data stream and when it was fetched.

    Owned and mutated by a single synchronization unit; everyone else reads it.
    """

    current_value: V
    last_updated: Optional[datetime] = None
    loading: bool = False
    phase: SyncPhase = SyncPhase.IDLE
    last_outcome: Optional[SyncOutcome] = field(default=None)

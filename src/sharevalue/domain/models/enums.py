"""Domain enumerations."""

from enum import Enum


class DataKind(str, Enum):
    """The six market data streams kept in sync with remote sources."""

    CURRENT_PRICE = "current_price"
    CURRENT_RATE = "current_rate"
    INTRADAY_PRICE = "intraday_price"
    INTRADAY_RATE = "intraday_rate"
    HISTORICAL_PRICE = "historical_price"
    HISTORICAL_RATE = "historical_rate"

    @property
    def is_live(self) -> bool:
        """Live and intraday streams share the short refresh cadence."""
        return self not in (DataKind.HISTORICAL_PRICE, DataKind.HISTORICAL_RATE)


class SyncPhase(str, Enum):
    """Where a synchronization unit is in its fetch cycle."""

    IDLE = "IDLE"
    FETCHING = "FETCHING"


class SyncOutcome(str, Enum):
    """Terminal result of one refresh attempt."""

    UPDATED = "UPDATED"
    FELL_BACK_TO_CACHE = "FELL_BACK_TO_CACHE"
    FELL_BACK_TO_DEFAULT = "FELL_BACK_TO_DEFAULT"

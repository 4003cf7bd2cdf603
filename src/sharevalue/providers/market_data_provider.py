"""Quote and rate source protocols."""

from datetime import date, datetime
from typing import Protocol

from sharevalue.domain.models import TimeSeries


class QuoteSource(Protocol):
    """
    Protocol for stock price sources.

    Calls block and raise on failure (network, timeout, bad payload); the
    synchronization units run them off the event loop and handle every error.
    """

    def get_current_price(self) -> float:
        """Return the latest traded price."""
        ...

    def get_intraday(self, since: datetime) -> TimeSeries:
        """Return intraday samples at or after since, ascending."""
        ...

    def get_historical(self, from_date: date, to_date: date) -> TimeSeries:
        """Return one closing sample per trading day in [from_date, to_date], ascending."""
        ...


class RateSource(Protocol):
    """Protocol for exchange rate sources (same shape as QuoteSource, for one currency pair)."""

    def get_current_price(self) -> float:
        """Return the latest rate."""
        ...

    def get_intraday(self, since: datetime) -> TimeSeries:
        """Return intraday rate samples at or after since, ascending."""
        ...

    def get_historical(self, from_date: date, to_date: date) -> TimeSeries:
        """Return one daily rate per day in [from_date, to_date], ascending."""
        ...

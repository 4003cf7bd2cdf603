"""
Quote and rate sources backed by Yahoo Finance via yfinance.

Every method raises on failure; fallback to cached data is the caller's job.
"""

import logging
import math
from datetime import date, datetime, timedelta

from sharevalue.core.exceptions import SourceError
from sharevalue.core.timezone import EASTERN_TZ, market_close_utc, to_utc
from sharevalue.domain.models import TimePoint, TimeSeries

logger = logging.getLogger(__name__)


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


def _finite(value) -> bool:
    return value is not None and not isinstance(value, bool) and math.isfinite(float(value))


def _price_from_info(symbol: str, info) -> float:
    """currentPrice preferred, then regularMarketPrice."""
    if not isinstance(info, dict):
        raise SourceError(symbol, "quote info unavailable")
    for field_name in ("currentPrice", "regularMarketPrice"):
        price = info.get(field_name)
        try:
            if _finite(price) and float(price) > 0:
                return float(price)
        except (TypeError, ValueError):
            continue
    raise SourceError(symbol, "quote has no usable price")


def _frame_to_points(frame, daily: bool) -> TimeSeries:
    """
    Convert a yfinance history DataFrame to points from its Close column.

    Daily bars are stamped at the US market close of their calendar date so
    that stock and FX bars (labelled in different exchange timezones) share
    date keys.
    """
    if frame is None or frame.empty or "Close" not in frame.columns:
        return []
    points = []
    for idx, close in frame["Close"].items():
        try:
            if not _finite(close):
                continue
        except (TypeError, ValueError):
            continue
        when = idx.to_pydatetime() if hasattr(idx, "to_pydatetime") else idx
        if daily:
            timestamp = market_close_utc(when.date() if isinstance(when, datetime) else when)
        elif when.tzinfo is None:
            timestamp = to_utc(EASTERN_TZ.localize(when))
        else:
            timestamp = to_utc(when)
        points.append(TimePoint(timestamp=timestamp, value=float(close)))
    points.sort(key=lambda p: p.timestamp)
    return points


class _YFinanceSource:
    """Shared fetch logic for one Yahoo Finance ticker."""

    def __init__(self, ticker_symbol: str):
        self._ticker_symbol = ticker_symbol

    @property
    def ticker_symbol(self) -> str:
        return self._ticker_symbol

    def _ticker(self):
        return _get_yf().Ticker(self._ticker_symbol)

    def get_current_price(self) -> float:
        return _price_from_info(self._ticker_symbol, self._ticker().info)

    def get_intraday(self, since: datetime) -> TimeSeries:
        frame = self._ticker().history(period="1d", interval="5m", auto_adjust=False)
        cutoff = to_utc(since)
        return [p for p in _frame_to_points(frame, daily=False) if p.timestamp >= cutoff]

    def get_historical(self, from_date: date, to_date: date) -> TimeSeries:
        if from_date > to_date:
            return []
        frame = self._ticker().history(
            start=from_date,
            end=to_date + timedelta(days=1),
            interval="1d",
            auto_adjust=False,
        )
        points = _frame_to_points(frame, daily=True)
        logger.debug("Fetched %d daily bars for %s", len(points), self._ticker_symbol)
        return points


class YFinanceQuoteSource(_YFinanceSource):
    """Share price source for a single stock symbol."""

    def __init__(self, symbol: str = "TSLA"):
        super().__init__(symbol.strip().upper())


class YFinanceRateSource(_YFinanceSource):
    """Exchange rate source for one currency pair (Yahoo ticker like USDGBP=X)."""

    def __init__(self, base_currency: str = "USD", quote_currency: str = "GBP"):
        super().__init__(f"{base_currency.strip().upper()}{quote_currency.strip().upper()}=X")

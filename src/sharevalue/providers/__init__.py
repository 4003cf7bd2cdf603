"""Market data providers module."""

from sharevalue.providers.market_data_provider import QuoteSource, RateSource
from sharevalue.providers.stub_provider import StubQuoteSource, StubRateSource
from sharevalue.providers.yfinance_provider import YFinanceQuoteSource, YFinanceRateSource

__all__ = [
    "QuoteSource",
    "RateSource",
    "StubQuoteSource",
    "StubRateSource",
    "YFinanceQuoteSource",
    "YFinanceRateSource",
]

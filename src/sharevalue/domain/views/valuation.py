"""View models for valuation outputs."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DerivedValuation:
    """Value of the holding in both currencies. Always recomputed, never stored."""

    usd_value: float = 0.0
    gbp_value: float = 0.0


@dataclass(frozen=True)
class ValuationPoint:
    """A chart point: the valuation at the timestamp of a price sample."""

    timestamp: datetime
    price: float
    rate: float
    usd_value: float
    gbp_value: float

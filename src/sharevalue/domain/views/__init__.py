"""View models for valuation outputs."""

from sharevalue.domain.views.valuation import DerivedValuation, ValuationPoint

__all__ = [
    "DerivedValuation",
    "ValuationPoint",
]

"""API routers package."""

from sharevalue.api.routers.valuation import router as valuation_router
from sharevalue.api.routers.holding import router as holding_router
from sharevalue.api.routers.scenarios import router as scenarios_router
from sharevalue.api.routers.refresh import router as refresh_router

__all__ = [
    "valuation_router",
    "holding_router",
    "scenarios_router",
    "refresh_router",
]

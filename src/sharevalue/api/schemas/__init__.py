"""Pydantic schemas for API request/response."""

from sharevalue.api.schemas.valuation import (
    CurrentValuationResponse,
    ValuationPointResponse,
    ValuationSeriesResponse,
    SyncStatusResponse,
    EngineStatusResponse,
)
from sharevalue.api.schemas.holding import SharesUpdate, SharesResponse
from sharevalue.api.schemas.scenario import (
    ScenarioUpdateRequest,
    ScenarioReorderRequest,
    ScenarioResponse,
    ScenarioListResponse,
    ScenarioValuationResponse,
)
from sharevalue.api.schemas.refresh import RefreshResponse, SignalRequest, SignalResponse

__all__ = [
    "CurrentValuationResponse",
    "ValuationPointResponse",
    "ValuationSeriesResponse",
    "SyncStatusResponse",
    "EngineStatusResponse",
    "SharesUpdate",
    "SharesResponse",
    "ScenarioUpdateRequest",
    "ScenarioReorderRequest",
    "ScenarioResponse",
    "ScenarioListResponse",
    "ScenarioValuationResponse",
    "RefreshResponse",
    "SignalRequest",
    "SignalResponse",
]

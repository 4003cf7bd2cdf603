"""Pydantic schemas for valuation endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from sharevalue.domain.models import DataKind, SyncOutcome, SyncPhase


class CurrentValuationResponse(BaseModel):
    """Response schema for the live valuation."""

    symbol: str
    rate_pair: str
    price: float
    rate: float
    shares: int
    usd_value: float
    gbp_value: float
    last_updated: Optional[datetime] = None
    is_online: bool


class ValuationPointResponse(BaseModel):
    """Response schema for one chart point."""

    model_config = {"from_attributes": True}

    timestamp: datetime
    price: float
    rate: float
    usd_value: float
    gbp_value: float


class ValuationSeriesResponse(BaseModel):
    """Response schema for a daily or historical chart."""

    points: list[ValuationPointResponse]
    count: int


class SyncStatusResponse(BaseModel):
    """Response schema for one synchronization unit."""

    kind: DataKind
    last_updated: Optional[datetime] = None
    loading: bool
    phase: SyncPhase
    last_outcome: Optional[SyncOutcome] = None


class EngineStatusResponse(BaseModel):
    """Response schema for the state of every unit."""

    is_online: bool
    units: list[SyncStatusResponse]

"""Pydantic schemas for what-if scenario endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ScenarioUpdateRequest(BaseModel):
    """Request schema for replacing a scenario's editable fields."""

    name: str = Field(..., min_length=1, max_length=255)
    use_live_price: bool = True
    use_live_rate: bool = True
    custom_price: Optional[float] = None
    custom_rate: Optional[float] = None


class ScenarioReorderRequest(BaseModel):
    """Request schema for reordering scenarios."""

    ids: list[str] = Field(..., description="Every scenario id, in the new order")


class ScenarioResponse(BaseModel):
    """Response schema for a single scenario."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    order: int
    use_live_price: bool
    use_live_rate: bool
    custom_price: Optional[float] = None
    custom_rate: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ScenarioListResponse(BaseModel):
    """Response schema for listing scenarios."""

    scenarios: list[ScenarioResponse]
    count: int


class ScenarioValuationResponse(BaseModel):
    """Response schema for a scenario's valuation."""

    id: str
    price: float
    rate: float
    usd_value: float
    gbp_value: float

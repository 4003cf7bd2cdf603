"""Pydantic schemas for the share holding endpoints."""

from pydantic import BaseModel, Field


class SharesUpdate(BaseModel):
    """Request schema for setting the share count."""

    shares: int = Field(..., ge=0, description="Number of shares held")


class SharesResponse(BaseModel):
    """Response schema for the share count."""

    shares: int

"""Pydantic schemas for refresh and signal endpoints."""

from typing import Optional

from pydantic import BaseModel

from sharevalue.domain.models import DataKind, SyncOutcome


class RefreshResponse(BaseModel):
    """Response schema for a forced refresh."""

    outcomes: dict[DataKind, Optional[SyncOutcome]]


class SignalRequest(BaseModel):
    """Request schema for a visibility, focus or connectivity change."""

    value: bool


class SignalResponse(BaseModel):
    """Response schema for a signal: how many refreshes it started."""

    refreshes_started: int
    is_online: bool

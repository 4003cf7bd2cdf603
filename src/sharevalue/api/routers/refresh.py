"""Refresh and app-state signal endpoints."""

from fastapi import APIRouter, Depends

from sharevalue.api.deps import get_context
from sharevalue.api.schemas import RefreshResponse, SignalRequest, SignalResponse
from sharevalue.app_context import AppContext

router = APIRouter(tags=["refresh"])


@router.post("/refresh", response_model=RefreshResponse)
async def force_refresh(context: AppContext = Depends(get_context)) -> RefreshResponse:
    """Refresh every stream now, ignoring staleness, and report the outcomes."""
    return RefreshResponse(outcomes=await context.refresh_all())


def _signal_response(context: AppContext, tasks: list) -> SignalResponse:
    return SignalResponse(refreshes_started=len(tasks), is_online=context.is_online.value)


@router.post("/signals/visibility", response_model=SignalResponse)
async def visibility_changed(
    data: SignalRequest,
    context: AppContext = Depends(get_context),
) -> SignalResponse:
    return _signal_response(context, context.notify_visibility(data.value))


@router.post("/signals/focus", response_model=SignalResponse)
async def focus_changed(
    data: SignalRequest,
    context: AppContext = Depends(get_context),
) -> SignalResponse:
    return _signal_response(context, context.notify_focus(data.value))


@router.post("/signals/online", response_model=SignalResponse)
async def connectivity_changed(
    data: SignalRequest,
    context: AppContext = Depends(get_context),
) -> SignalResponse:
    """Report going offline or back online. Coming back online refreshes everything."""
    return _signal_response(context, context.set_online(data.value))

"""Valuation endpoints: live value, charts and sync status."""

from fastapi import APIRouter, Depends

from sharevalue.api.deps import get_context
from sharevalue.api.schemas import (
    CurrentValuationResponse,
    EngineStatusResponse,
    SyncStatusResponse,
    ValuationPointResponse,
    ValuationSeriesResponse,
)
from sharevalue.app_context import AppContext
from sharevalue.domain.views import ValuationPoint

router = APIRouter(prefix="/valuation", tags=["valuation"])


def _series_response(points: list[ValuationPoint]) -> ValuationSeriesResponse:
    return ValuationSeriesResponse(
        points=[ValuationPointResponse.model_validate(p) for p in points],
        count=len(points),
    )


@router.get("/current", response_model=CurrentValuationResponse)
async def get_current_valuation(
    context: AppContext = Depends(get_context),
) -> CurrentValuationResponse:
    """Current value of the holding in USD and GBP."""
    valuation = context.current_valuation.value
    return CurrentValuationResponse(
        symbol=context.settings.symbol,
        rate_pair=context.settings.rate_pair,
        price=context.current_price.value,
        rate=context.current_rate.value,
        shares=context.holding.shares,
        usd_value=valuation.usd_value,
        gbp_value=valuation.gbp_value,
        last_updated=context.last_updated.value,
        is_online=context.is_online.value,
    )


@router.get("/daily", response_model=ValuationSeriesResponse)
async def get_daily_series(context: AppContext = Depends(get_context)) -> ValuationSeriesResponse:
    """Today's valuation at each intraday price sample."""
    return _series_response(context.daily_series.value)


@router.get("/historical", response_model=ValuationSeriesResponse)
async def get_historical_series(
    context: AppContext = Depends(get_context),
) -> ValuationSeriesResponse:
    """Daily valuation over the retained history window."""
    return _series_response(context.historical_series.value)


@router.get("/status", response_model=EngineStatusResponse)
async def get_status(context: AppContext = Depends(get_context)) -> EngineStatusResponse:
    """Sync state of every data stream."""
    return EngineStatusResponse(
        is_online=context.is_online.value,
        units=[
            SyncStatusResponse(
                kind=kind,
                last_updated=state.last_updated,
                loading=state.loading,
                phase=state.phase,
                last_outcome=state.last_outcome,
            )
            for kind, state in context.unit_states().items()
        ],
    )

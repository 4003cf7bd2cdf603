"""What-if scenario endpoints."""

from fastapi import APIRouter, Depends

from sharevalue.api.deps import get_context
from sharevalue.api.schemas import (
    ScenarioListResponse,
    ScenarioReorderRequest,
    ScenarioResponse,
    ScenarioUpdateRequest,
    ScenarioValuationResponse,
)
from sharevalue.app_context import AppContext
from sharevalue.domain.models import WhatIfScenario
from sharevalue.services.valuation_graph import scenario_inputs

router = APIRouter(prefix="/scenarios", tags=["scenarios"])


def _list_response(scenarios: list[WhatIfScenario]) -> ScenarioListResponse:
    return ScenarioListResponse(
        scenarios=[ScenarioResponse.model_validate(s) for s in scenarios],
        count=len(scenarios),
    )


@router.get("", response_model=ScenarioListResponse)
async def list_scenarios(context: AppContext = Depends(get_context)) -> ScenarioListResponse:
    """List scenarios in display order."""
    return _list_response(context.scenario_list.value)


@router.post("", response_model=ScenarioResponse, status_code=201)
async def add_scenario(context: AppContext = Depends(get_context)) -> ScenarioResponse:
    """Append a new scenario that uses live price and rate."""
    return ScenarioResponse.model_validate(context.add_scenario())


@router.put("/order", response_model=ScenarioListResponse)
async def reorder_scenarios(
    data: ScenarioReorderRequest,
    context: AppContext = Depends(get_context),
) -> ScenarioListResponse:
    """Reorder scenarios. The body must list every scenario id exactly once."""
    return _list_response(context.reorder_scenarios(data.ids))


@router.put("/{scenario_id}", response_model=ScenarioResponse)
async def update_scenario(
    scenario_id: str,
    data: ScenarioUpdateRequest,
    context: AppContext = Depends(get_context),
) -> ScenarioResponse:
    """Replace a scenario's name and valuation inputs."""
    existing = context.scenario_store.get(scenario_id)
    updated = context.update_scenario(
        existing.copy(
            name=data.name,
            use_live_price=data.use_live_price,
            use_live_rate=data.use_live_rate,
            custom_price=data.custom_price,
            custom_rate=data.custom_rate,
        )
    )
    return ScenarioResponse.model_validate(updated)


@router.delete("/{scenario_id}", status_code=204)
async def delete_scenario(
    scenario_id: str,
    context: AppContext = Depends(get_context),
) -> None:
    context.delete_scenario(scenario_id)


@router.get("/{scenario_id}/valuation", response_model=ScenarioValuationResponse)
async def get_scenario_valuation(
    scenario_id: str,
    context: AppContext = Depends(get_context),
) -> ScenarioValuationResponse:
    """Value of the holding under one scenario."""
    valuation = context.scenario_valuation(scenario_id).value
    price, rate = scenario_inputs(
        context.scenario_store.get(scenario_id),
        context.current_price.value,
        context.current_rate.value,
    )
    return ScenarioValuationResponse(
        id=scenario_id,
        price=price,
        rate=rate,
        usd_value=valuation.usd_value,
        gbp_value=valuation.gbp_value,
    )

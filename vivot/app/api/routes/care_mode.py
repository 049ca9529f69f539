"""Care Mode and itinerary adaptation endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from vivot.app.api.deps import (
    ContextDep,
    enforce_rate_limit,
    get_adaptation_advisor,
    get_care_mode_planner,
)
from vivot.app.generation.adaptation import AdaptationAdvisor
from vivot.app.generation.care_mode import CareModePlanner
from vivot.app.models.care import AdaptationRequest, AdaptationResponse, CareModeRequest
from vivot.app.models.generated import CarePlan

router = APIRouter(
    prefix="/trips", tags=["care-mode"], dependencies=[Depends(enforce_rate_limit)]
)


@router.post("/{trip_id}/care-mode", response_model=CarePlan, response_model_by_alias=False)
async def care_mode(
    trip_id: str,
    request: CareModeRequest,
    ctx: ContextDep,
    planner: Annotated[CareModePlanner, Depends(get_care_mode_planner)],
) -> CarePlan:
    """Wellness micro-itinerary for an unwell traveller. Nothing is persisted."""
    return await planner.generate_care_plan(
        ctx, trip_id, request.condition, request.current_activity_id
    )


@router.post("/{trip_id}/adapt", response_model=AdaptationResponse)
async def adapt_itinerary(
    trip_id: str,
    request: AdaptationRequest,
    ctx: ContextDep,
    advisor: Annotated[AdaptationAdvisor, Depends(get_adaptation_advisor)],
) -> AdaptationResponse:
    """Suggest adaptations to weather, time and remaining budget."""
    suggestions = await advisor.suggest_adaptations(ctx, trip_id, request)
    return AdaptationResponse(suggestions=suggestions)

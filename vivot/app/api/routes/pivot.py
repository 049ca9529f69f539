"""Mood Pivot endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from vivot.app.api.deps import ContextDep, enforce_rate_limit, get_pivot_engine
from vivot.app.models.activity import Activity
from vivot.app.models.pivot import ConfirmPivotRequest, PivotLog, PivotProposal, PivotRequest
from vivot.app.pivot.engine import PivotEngine

router = APIRouter(prefix="/trips", tags=["pivot"])

EngineDep = Annotated[PivotEngine, Depends(get_pivot_engine)]


@router.post(
    "/{trip_id}/pivot",
    response_model=PivotProposal,
    dependencies=[Depends(enforce_rate_limit)],
)
async def propose_pivot(
    trip_id: str, request: PivotRequest, ctx: ContextDep, engine: EngineDep
) -> PivotProposal:
    """Propose a replacement for the current activity. Nothing is persisted.

    Raises:
        NotFoundError: 404 if the trip or activity is absent
        GenerationFailedError: 503 if the generator fails
    """
    return await engine.propose_pivot(ctx, trip_id, request.current_activity_id, request.context())


@router.post("/{trip_id}/pivot/confirm", response_model=Activity)
async def confirm_pivot(
    trip_id: str, request: ConfirmPivotRequest, ctx: ContextDep, engine: EngineDep
) -> Activity:
    """Apply a replacement in place and return the updated activity.

    The appended log entry is listed by GET /trips/{trip_id}/pivots.

    Raises:
        NotFoundError: 404 if the trip or activity is absent
        InputValidationError: 422 if the activity is a shadow option
    """
    commit = engine.confirm_pivot(
        ctx, trip_id, request.old_activity_id, request.new_activity_data, request.reason
    )
    return commit.activity


@router.get("/{trip_id}/pivots", response_model=list[PivotLog])
async def list_pivot_logs(trip_id: str, ctx: ContextDep, engine: EngineDep) -> list[PivotLog]:
    """Pivot history, newest first."""
    return engine.list_pivot_logs(ctx, trip_id)

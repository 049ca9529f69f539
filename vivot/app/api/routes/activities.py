"""Activity endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from vivot.app.api.deps import ContextDep, get_itinerary_service
from vivot.app.itinerary.service import ItineraryService
from vivot.app.models.activity import Activity, ActivityCreate, ActivityUpdate

router = APIRouter(prefix="/activities", tags=["activities"])

ServiceDep = Annotated[ItineraryService, Depends(get_itinerary_service)]


@router.post("", response_model=Activity, status_code=status.HTTP_201_CREATED)
async def create_activity(
    request: ActivityCreate, ctx: ContextDep, service: ServiceDep
) -> Activity:
    """Add an activity (or a shadow option) to a trip."""
    return service.create_activity(ctx, request)


@router.patch("/{activity_id}", response_model=Activity)
async def update_activity(
    activity_id: str, request: ActivityUpdate, ctx: ContextDep, service: ServiceDep
) -> Activity:
    """Patch an activity.

    Toggling `completed` or changing the cost of a completed activity
    updates the trip's budget ledger in the same transaction.
    """
    return service.update_activity(ctx, activity_id, request.to_updates())


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(activity_id: str, ctx: ContextDep, service: ServiceDep) -> Response:
    """Delete one activity."""
    service.delete_activity(ctx, activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

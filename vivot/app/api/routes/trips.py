"""Trip endpoints and trip-scoped itinerary queries."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from vivot.app.api.deps import ContextDep, get_itinerary_service
from vivot.app.itinerary.service import ItineraryService
from vivot.app.models.activity import Activity
from vivot.app.models.budget import BudgetItem
from vivot.app.models.trip import Trip, TripCreate, TripUpdate

router = APIRouter(prefix="/trips", tags=["trips"])

ServiceDep = Annotated[ItineraryService, Depends(get_itinerary_service)]


@router.post("", response_model=Trip, status_code=status.HTTP_201_CREATED)
async def create_trip(request: TripCreate, ctx: ContextDep, service: ServiceDep) -> Trip:
    """Create an empty trip."""
    return service.create_trip(ctx, request)


@router.get("", response_model=list[Trip])
async def list_trips(ctx: ContextDep, service: ServiceDep) -> list[Trip]:
    """List the caller's trips, newest first."""
    return service.list_trips(ctx)


@router.get("/{trip_id}", response_model=Trip)
async def get_trip(trip_id: str, ctx: ContextDep, service: ServiceDep) -> Trip:
    """Get one trip.

    Raises:
        NotFoundError: 404 if the trip is absent or owned by another caller
    """
    return service.get_trip(ctx, trip_id)


@router.patch("/{trip_id}", response_model=Trip)
async def update_trip(
    trip_id: str, request: TripUpdate, ctx: ContextDep, service: ServiceDep
) -> Trip:
    """Partially update a trip. `spent` is never writable here."""
    return service.update_trip(ctx, trip_id, request)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(trip_id: str, ctx: ContextDep, service: ServiceDep) -> Response:
    """Delete a trip and everything it owns."""
    service.delete_trip(ctx, trip_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{trip_id}/activities", response_model=list[Activity])
async def list_activities(trip_id: str, ctx: ContextDep, service: ServiceDep) -> list[Activity]:
    """Main itinerary ordered by (day, order_index), shadows excluded."""
    return service.list_activities(ctx, trip_id)


@router.get("/{trip_id}/shadows", response_model=list[Activity])
async def list_shadows(trip_id: str, ctx: ContextDep, service: ServiceDep) -> list[Activity]:
    """Shadow options ordered by (day, order_index)."""
    return service.list_shadow_activities(ctx, trip_id)


@router.get("/{trip_id}/budget", response_model=list[BudgetItem])
async def list_budget_items(
    trip_id: str, ctx: ContextDep, service: ServiceDep
) -> list[BudgetItem]:
    """Budget items, newest date first."""
    return service.list_budget_items(ctx, trip_id)

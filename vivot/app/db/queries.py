"""Tenancy-safe lookup helpers.

A trip owned by another caller is reported exactly like a missing one so
that ids of other callers' trips cannot be discovered by guessing.
"""

from vivot.app.db.context import RequestContext
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import NotFoundError
from vivot.app.models.activity import Activity
from vivot.app.models.budget import BudgetItem
from vivot.app.models.trip import Trip


def get_owned_trip(store: ItineraryStore, ctx: RequestContext, trip_id: str) -> Trip:
    """Fetch a trip with caller scoping enforced.

    Args:
        store: Itinerary store
        ctx: Request context with the caller's user_id
        trip_id: Trip ID

    Returns:
        The trip

    Raises:
        NotFoundError: If the trip is absent or owned by another caller
    """
    trip = store.get_trip(trip_id)
    if trip is None or trip.user_id != ctx.user_id:
        raise NotFoundError(f"Trip {trip_id} not found")
    return trip


def get_owned_activity(
    store: ItineraryStore, ctx: RequestContext, activity_id: str
) -> tuple[Trip, Activity]:
    """Fetch an activity and its trip with caller scoping enforced."""
    activity = store.get_activity(activity_id)
    if activity is None:
        raise NotFoundError(f"Activity {activity_id} not found")
    trip = store.get_trip(activity.trip_id)
    if trip is None or trip.user_id != ctx.user_id:
        raise NotFoundError(f"Activity {activity_id} not found")
    return trip, activity


def get_trip_activity(
    store: ItineraryStore, ctx: RequestContext, trip_id: str, activity_id: str
) -> tuple[Trip, Activity]:
    """Fetch an activity that must belong to the given trip."""
    trip = get_owned_trip(store, ctx, trip_id)
    activity = store.get_activity(activity_id)
    if activity is None or activity.trip_id != trip.id:
        raise NotFoundError(f"Activity {activity_id} not found")
    return trip, activity


def get_owned_budget_item(
    store: ItineraryStore, ctx: RequestContext, item_id: str
) -> tuple[Trip, BudgetItem]:
    """Fetch a budget item and its trip with caller scoping enforced."""
    item = store.get_budget_item(item_id)
    if item is None:
        raise NotFoundError(f"Budget item {item_id} not found")
    trip = store.get_trip(item.trip_id)
    if trip is None or trip.user_id != ctx.user_id:
        raise NotFoundError(f"Budget item {item_id} not found")
    return trip, item

"""Trip and activity CRUD with ownership checks.

Writes that can move trip.spent (completion toggles, cost changes, budget
items) go through the BudgetLedger instead of straight to the store.
"""

import logging
from typing import Any

from vivot.app.db.context import RequestContext
from vivot.app.db.queries import get_owned_activity, get_owned_trip
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import InputValidationError
from vivot.app.ledger.budget import BudgetLedger
from vivot.app.models.activity import Activity, ActivityCreate
from vivot.app.models.budget import BudgetItem
from vivot.app.models.trip import Trip, TripCreate, TripUpdate

logger = logging.getLogger(__name__)


class ItineraryService:
    """Caller-scoped access to trips and their activities."""

    def __init__(self, store: ItineraryStore, ledger: BudgetLedger | None = None) -> None:
        self._store = store
        self._ledger = ledger or BudgetLedger(store)

    # Trips

    def create_trip(self, ctx: RequestContext, payload: TripCreate) -> Trip:
        """Create an empty trip owned by the caller."""
        trip = self._store.create_trip(payload.to_trip(ctx.user_id))
        logger.info(f"Trip {trip.id} created for user {ctx.user_id}")
        return trip

    def list_trips(self, ctx: RequestContext) -> list[Trip]:
        return self._store.list_trips(ctx.user_id)

    def get_trip(self, ctx: RequestContext, trip_id: str) -> Trip:
        return get_owned_trip(self._store, ctx, trip_id)

    def update_trip(self, ctx: RequestContext, trip_id: str, patch: TripUpdate) -> Trip:
        """Apply a partial trip update.

        Raises:
            NotFoundError: If the trip is absent or owned by another caller
            InputValidationError: If the resulting dates are inverted
        """
        with self._store.transaction():
            trip = get_owned_trip(self._store, ctx, trip_id)
            updates = patch.model_dump(exclude_unset=True, exclude_none=True)
            start = updates.get("start_date", trip.start_date)
            end = updates.get("end_date", trip.end_date)
            if end < start:
                raise InputValidationError("end_date must be >= start_date")
            return self._store.update_trip(trip_id, updates)

    def delete_trip(self, ctx: RequestContext, trip_id: str) -> None:
        """Delete a trip and everything it owns."""
        with self._store.transaction():
            get_owned_trip(self._store, ctx, trip_id)
            self._store.delete_trip(trip_id)
        logger.info(f"Trip {trip_id} deleted")

    # Activities

    def list_activities(self, ctx: RequestContext, trip_id: str) -> list[Activity]:
        get_owned_trip(self._store, ctx, trip_id)
        return self._store.list_activities(trip_id)

    def list_shadow_activities(self, ctx: RequestContext, trip_id: str) -> list[Activity]:
        get_owned_trip(self._store, ctx, trip_id)
        return self._store.list_shadow_activities(trip_id)

    def list_budget_items(self, ctx: RequestContext, trip_id: str) -> list[BudgetItem]:
        get_owned_trip(self._store, ctx, trip_id)
        return self._store.list_budget_items(trip_id)

    def create_activity(self, ctx: RequestContext, payload: ActivityCreate) -> Activity:
        """Add an activity to a trip.

        A shadow option must reference a main (non-shadow) activity of the
        same trip; a main activity carries no parent.

        Raises:
            NotFoundError: If the trip is absent or owned by another caller
            InputValidationError: If the shadow/parent link is broken
        """
        with self._store.transaction():
            get_owned_trip(self._store, ctx, payload.trip_id)
            self._check_shadow_link(
                payload.trip_id, payload.is_shadow_option, payload.parent_activity_id
            )
            return self._store.create_activity(payload.to_activity())

    def update_activity(
        self, ctx: RequestContext, activity_id: str, updates: dict[str, Any]
    ) -> Activity:
        """Patch an activity through the ledger.

        Raises:
            NotFoundError: If the activity is absent or owned by another caller
            InputValidationError: If flipping is_shadow_option would break a
                shadow/parent link
        """
        with self._store.transaction():
            _, activity = get_owned_activity(self._store, ctx, activity_id)
            is_shadow = updates.get("is_shadow_option")
            if is_shadow is not None and is_shadow != activity.is_shadow_option:
                self._check_shadow_link(
                    activity.trip_id, is_shadow, activity.parent_activity_id, activity.id
                )
            return self._ledger.update_activity(ctx, activity_id, updates)

    def delete_activity(self, ctx: RequestContext, activity_id: str) -> None:
        """Delete one activity.

        Expenses already mirrored from its completion stay on the ledger.
        """
        with self._store.transaction():
            get_owned_activity(self._store, ctx, activity_id)
            self._store.delete_activity(activity_id)

    def _check_shadow_link(
        self,
        trip_id: str,
        is_shadow: bool,
        parent_activity_id: str | None,
        activity_id: str | None = None,
    ) -> None:
        """Enforce that shadows hang off a main activity of the same trip.

        A main activity carries no parent, and an activity that shadows point
        to cannot itself become a shadow.
        """
        if not is_shadow:
            if parent_activity_id is not None:
                raise InputValidationError("Only shadow options may set parent_activity_id")
            return

        if activity_id is not None and any(
            shadow.parent_activity_id == activity_id
            for shadow in self._store.list_shadow_activities(trip_id)
        ):
            raise InputValidationError("An activity with shadow options cannot become a shadow")
        if parent_activity_id is None:
            raise InputValidationError("Shadow option requires parent_activity_id")
        parent = self._store.get_activity(parent_activity_id)
        if parent is None or parent.trip_id != trip_id or parent.is_shadow_option:
            raise InputValidationError(
                "parent_activity_id must reference a main activity of the same trip"
            )

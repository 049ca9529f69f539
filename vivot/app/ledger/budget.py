"""Budget ledger: keeps trip.spent consistent with the trip's budget items.

Rules:
    - Inserting or deleting a budget item recomputes spent = max(0, sum(amount)).
    - Completing an activity with cost > 0 mirrors it as a budget item.
    - Un-completing an activity removes its mirrored item.
    - Changing the cost of a completed activity replaces its mirrored item.

Every mutation and its recomputation run inside one store transaction.
"""

import logging
from datetime import date
from typing import Any

from vivot.app.db.context import RequestContext
from vivot.app.db.queries import get_owned_activity, get_owned_budget_item, get_owned_trip
from vivot.app.db.repositories import ItineraryStore
from vivot.app.models.activity import Activity
from vivot.app.models.budget import BudgetItem, BudgetItemCreate
from vivot.app.models.trip import Trip

logger = logging.getLogger(__name__)


def compute_spent(items: list[BudgetItem]) -> float:
    """Sum of item amounts, floored at zero."""
    return max(0.0, sum(item.amount for item in items))


def find_mirrored_item(items: list[BudgetItem], activity: Activity) -> BudgetItem | None:
    """Find the budget item mirrored from an activity's completion.

    Matching is by source_activity_id only; items recorded by hand carry no
    source and are never claimed by an activity.
    """
    return next((item for item in items if item.source_activity_id == activity.id), None)


class BudgetLedger:
    """Owns every write that affects trip.spent."""

    def __init__(self, store: ItineraryStore) -> None:
        self._store = store

    def recompute_spent(self, trip_id: str) -> Trip:
        """Recompute and persist spent for a trip."""
        with self._store.transaction():
            spent = compute_spent(self._store.list_budget_items(trip_id))
            return self._store.set_trip_spent(trip_id, spent)

    def create_budget_item(self, ctx: RequestContext, payload: BudgetItemCreate) -> BudgetItem:
        """Record an expense and recompute spent."""
        with self._store.transaction():
            get_owned_trip(self._store, ctx, payload.trip_id)
            item = self._store.create_budget_item(payload.to_item())
            self.recompute_spent(payload.trip_id)

        logger.info(f"Budget item {item.id} recorded for trip {item.trip_id}: {item.amount}")
        return item

    def delete_budget_item(self, ctx: RequestContext, item_id: str) -> None:
        """Remove an expense and recompute spent."""
        with self._store.transaction():
            trip, _ = get_owned_budget_item(self._store, ctx, item_id)
            self._store.delete_budget_item(item_id)
            self.recompute_spent(trip.id)

    def set_completion(self, ctx: RequestContext, activity_id: str, completed: bool) -> Activity:
        """Toggle an activity's completion flag."""
        return self.update_activity(ctx, activity_id, {"completed": completed})

    def update_activity(
        self, ctx: RequestContext, activity_id: str, updates: dict[str, Any]
    ) -> Activity:
        """Patch an activity, keeping the ledger in step with completion and cost.

        Args:
            ctx: Request context
            activity_id: Activity ID
            updates: Field values; non-updatable keys are dropped by the store

        Returns:
            Updated activity
        """
        with self._store.transaction():
            _, before = get_owned_activity(self._store, ctx, activity_id)
            after = self._store.update_activity(activity_id, updates)
            self.apply_activity_change(before, after)
            return after

    def apply_activity_change(self, before: Activity, after: Activity) -> None:
        """Reconcile the mirrored budget item after an activity changed.

        Must run inside the transaction that performed the activity update.
        """
        with self._store.transaction():
            if not before.completed and after.completed:
                # false -> true
                if after.cost > 0:
                    self._mirror(after)
                    self.recompute_spent(after.trip_id)
            elif before.completed and not after.completed:
                # true -> false
                if self._unmirror(before):
                    self.recompute_spent(after.trip_id)
            elif before.completed and after.completed and before.cost != after.cost:
                # Completed activity repriced
                self._unmirror(before)
                if after.cost > 0:
                    self._mirror(after)
                self.recompute_spent(after.trip_id)

    def _mirror(self, activity: Activity) -> BudgetItem:
        item = BudgetItem(
            trip_id=activity.trip_id,
            category=activity.category.value,
            amount=activity.cost,
            description=activity.title,
            date=date.today(),
            source_activity_id=activity.id,
        )
        return self._store.create_budget_item(item)

    def _unmirror(self, activity: Activity) -> bool:
        items = self._store.list_budget_items(activity.trip_id)
        mirrored = find_mirrored_item(items, activity)
        if mirrored is None:
            logger.warning(f"No mirrored budget item found for activity {activity.id}")
            return False
        self._store.delete_budget_item(mirrored.id)
        return True

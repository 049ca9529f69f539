"""Mood Pivot engine.

Per (trip, activity) attempt the states are idle -> proposed -> committed.
Proposing never persists anything; confirming swaps the activity content,
appends a pivot log and reconciles the ledger in one transaction. There is
no abort transition: an unconfirmed proposal is simply dropped.
"""

import logging

from vivot.app.db.context import RequestContext
from vivot.app.db.queries import get_owned_trip, get_trip_activity
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import InputValidationError
from vivot.app.ledger.budget import BudgetLedger
from vivot.app.llm.client import Generator
from vivot.app.models.activity import Activity
from vivot.app.models.common import EnergyLevel, PivotTrigger
from vivot.app.mood.aggregator import latest_energy
from vivot.app.models.pivot import (
    NewActivityData,
    PivotCommit,
    PivotContext,
    PivotLog,
    PivotProposal,
)
from vivot.app.models.trip import Trip
from vivot.app.utils.metrics import pivot_commits_total, pivot_proposals_total

logger = logging.getLogger(__name__)

DEFAULT_PIVOT_REASON = "Group energy low"


def _require_main(activity: Activity) -> None:
    """Pivots replace main itinerary entries; shadows are only ever the replacement."""
    if activity.is_shadow_option:
        raise InputValidationError(
            f"Activity {activity.id} is a shadow option and cannot be pivoted"
        )


class PivotEngine:
    """Proposes and commits replacements for low-energy moments."""

    def __init__(
        self, store: ItineraryStore, generator: Generator, ledger: BudgetLedger | None = None
    ) -> None:
        self._store = store
        self._generator = generator
        self._ledger = ledger or BudgetLedger(store)

    def find_shadow(self, trip_id: str, activity_id: str) -> Activity | None:
        """First shadow option (by day, order_index) attached to an activity."""
        for shadow in self._store.list_shadow_activities(trip_id):
            if shadow.parent_activity_id == activity_id:
                return shadow
        return None

    async def propose_pivot(
        self,
        ctx: RequestContext,
        trip_id: str,
        current_activity_id: str,
        context: PivotContext | None = None,
    ) -> PivotProposal:
        """Compute a replacement without persisting it.

        A pre-planned shadow option wins and skips the generator entirely.
        Otherwise the generator is called once with the activity and the
        situational context.

        Raises:
            NotFoundError: If the trip or activity is absent, or the activity
                belongs to another trip
            InputValidationError: If the activity is itself a shadow option
            GenerationFailedError: If the generator fails or returns
                malformed output
        """
        trip, activity = get_trip_activity(self._store, ctx, trip_id, current_activity_id)
        _require_main(activity)

        shadow = self.find_shadow(trip_id, activity.id)
        if shadow is not None:
            pivot_proposals_total.labels(source="shadow").inc()
            logger.info(f"Pivot for activity {activity.id} uses shadow option {shadow.id}")
            return PivotProposal(
                proposal=(
                    f"Energy is running low. Instead of {activity.title}, "
                    f"switch to the pre-planned {shadow.title}."
                ),
                new_activity=NewActivityData.from_activity(shadow),
                is_pre_planned=True,
            )

        filled = self._fill_context(trip, activity, context or PivotContext())
        reply = await self._generator.propose_alternative(activity=activity, context=filled)
        pivot_proposals_total.labels(source="generator").inc()

        # A generated replacement never claims an existing activity's identity
        new_activity = reply.new_activity.model_copy(update={"id": None})
        return PivotProposal(
            proposal=reply.proposal, new_activity=new_activity, is_pre_planned=False
        )

    def confirm_pivot(
        self,
        ctx: RequestContext,
        trip_id: str,
        old_activity_id: str,
        new_activity_data: NewActivityData,
        reason: str | None = None,
    ) -> PivotCommit:
        """Apply a replacement to the activity and log the pivot atomically.

        Args:
            ctx: Request context
            trip_id: Trip ID
            old_activity_id: Activity being replaced in place
            new_activity_data: Replacement content (from a proposal or the client)
            reason: Free-text reason recorded in the log

        Returns:
            The updated activity and the appended log entry

        Raises:
            NotFoundError: If the trip or activity is absent
            InputValidationError: If the activity is itself a shadow option
        """
        with self._store.transaction():
            _, before = get_trip_activity(self._store, ctx, trip_id, old_activity_id)
            _require_main(before)

            after = self._store.update_activity(
                before.id,
                {
                    "title": new_activity_data.title,
                    "description": new_activity_data.description,
                    "category": new_activity_data.category,
                    "location": new_activity_data.location,
                    "cost": new_activity_data.cost,
                    "duration": new_activity_data.duration,
                    "energy_level_requirement": EnergyLevel.low,
                    "is_shadow_option": False,
                },
            )
            self._ledger.apply_activity_change(before, after)

            log = self._store.create_pivot_log(
                PivotLog(
                    trip_id=trip_id,
                    previous_activity_id=before.id,
                    new_activity_id=self._shadow_source_id(trip_id, before, new_activity_data),
                    reason=reason or DEFAULT_PIVOT_REASON,
                    trigger=PivotTrigger.user_consensus,
                )
            )

        pivot_commits_total.labels(trigger=log.trigger.value).inc()
        logger.info(f"Pivot committed on trip {trip_id}: {before.title} -> {after.title}")
        return PivotCommit(activity=after, log=log)

    def list_pivot_logs(self, ctx: RequestContext, trip_id: str) -> list[PivotLog]:
        """Pivot history for a trip, newest first."""
        get_owned_trip(self._store, ctx, trip_id)
        return self._store.list_pivot_logs(trip_id)

    def _shadow_source_id(
        self, trip_id: str, activity: Activity, data: NewActivityData
    ) -> str | None:
        """Shadow id when the replacement came from one of this activity's shadows."""
        if data.id is None:
            return None
        shadow = self._store.get_activity(data.id)
        if (
            shadow is not None
            and shadow.trip_id == trip_id
            and shadow.is_shadow_option
            and shadow.parent_activity_id == activity.id
        ):
            return shadow.id
        return None

    def _fill_context(self, trip: Trip, activity: Activity, context: PivotContext) -> PivotContext:
        """Default missing context from the activity, the ledger and the latest mood."""
        group_mood = context.group_mood
        if group_mood is None:
            energy = latest_energy(self._store, trip.id)
            group_mood = energy.value if energy is not None else None

        return PivotContext(
            location=context.location or activity.location or None,
            time=context.time or activity.time or None,
            budget_remaining=(
                context.budget_remaining
                if context.budget_remaining is not None
                else trip.budget_remaining
            ),
            group_mood=group_mood,
        )

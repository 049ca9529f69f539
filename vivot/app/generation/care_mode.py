"""Care Mode: wellness micro-itineraries for one unwell traveller."""

import logging

from vivot.app.db.context import RequestContext
from vivot.app.db.queries import get_owned_trip, get_trip_activity
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import InputValidationError
from vivot.app.llm.client import Generator
from vivot.app.models.generated import CarePlan

logger = logging.getLogger(__name__)


class CareModePlanner:
    """Builds Care Mode plans. Nothing is persisted."""

    def __init__(self, store: ItineraryStore, generator: Generator) -> None:
        self._store = store
        self._generator = generator

    async def generate_care_plan(
        self,
        ctx: RequestContext,
        trip_id: str,
        condition: str,
        current_activity_id: str | None = None,
    ) -> CarePlan:
        """Ask the generator for a personal plan and a group adjustment.

        Raises:
            InputValidationError: If the condition is blank
            NotFoundError: If the trip or activity is absent
            GenerationFailedError: If the generator fails
        """
        condition = condition.strip()
        if not condition:
            raise InputValidationError("condition must not be empty")

        if current_activity_id is not None:
            trip, activity = get_trip_activity(self._store, ctx, trip_id, current_activity_id)
        else:
            trip, activity = get_owned_trip(self._store, ctx, trip_id), None

        plan = await self._generator.generate_care_plan(
            trip=trip, condition=condition, activity=activity
        )
        logger.info(
            f"Care plan for trip {trip_id}: {len(plan.personal_plan)} personal, "
            f"{len(plan.group_plan)} group item(s)"
        )
        return plan

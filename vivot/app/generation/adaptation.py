"""Free-text itinerary adaptation suggestions."""

import logging

from vivot.app.db.context import RequestContext
from vivot.app.db.queries import get_owned_trip
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import GenerationFailedError
from vivot.app.llm.client import Generator
from vivot.app.models.care import AdaptationRequest

logger = logging.getLogger(__name__)

FALLBACK_SUGGESTIONS = "Unable to generate suggestions at this time."


class AdaptationAdvisor:
    """Suggests adaptations of a trip's main itinerary to current conditions."""

    def __init__(self, store: ItineraryStore, generator: Generator) -> None:
        self._store = store
        self._generator = generator

    async def suggest_adaptations(
        self, ctx: RequestContext, trip_id: str, context: AdaptationRequest
    ) -> str:
        """Return suggestions, degrading to a fixed message if the generator fails.

        Raises:
            NotFoundError: If the trip is absent or owned by another caller
        """
        trip = get_owned_trip(self._store, ctx, trip_id)
        activities = self._store.list_activities(trip_id)
        budget_remaining = (
            context.budget_remaining
            if context.budget_remaining is not None
            else trip.budget_remaining
        )

        try:
            return await self._generator.suggest_adaptations(
                activities=activities,
                weather=context.weather,
                time=context.time,
                budget_remaining=budget_remaining,
            )
        except GenerationFailedError as e:
            logger.warning(f"Adaptation suggestions unavailable for trip {trip_id}: {e.detail}")
            return FALLBACK_SUGGESTIONS

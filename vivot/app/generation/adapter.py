"""Itinerary generation adapter.

Turns one chat message into a reply and, when the generator proposes a trip,
a persisted trip with its main activities and linked shadow options.
"""

import logging
from dataclasses import dataclass, field

from vivot.app.adapters.geocoding import Geocoder
from vivot.app.db.context import RequestContext
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import GeocodeUnavailableError, InputValidationError
from vivot.app.itinerary.preferences import load_preferences
from vivot.app.llm.client import Generator
from vivot.app.models.activity import Activity
from vivot.app.models.chat import ChatMessage
from vivot.app.models.common import ChatRole, Coordinates, EnergyLevel
from vivot.app.models.generated import GeneratedTrip
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import Trip

logger = logging.getLogger(__name__)

DEFAULT_CHAT_REPLY = "I'm here to help plan your next trip."


@dataclass
class GenerationResult:
    """Outcome of one chat turn."""

    assistant_reply: ChatMessage
    trip: Trip | None = None
    activities: list[Activity] = field(default_factory=list)


class _GeocodeBudget:
    """Caps geocoder lookups for one generation and stops after an outage."""

    def __init__(self, geocoder: Geocoder | None, max_lookups: int) -> None:
        self._geocoder = geocoder
        self._remaining = max_lookups
        self._available = True

    async def resolve(self, coords: Coordinates | None, query: str | None) -> Coordinates | None:
        if coords is not None and not coords.is_unresolved():
            return coords
        if not query or self._geocoder is None or not self._available or self._remaining <= 0:
            return None

        self._remaining -= 1
        try:
            return await self._geocoder.geocode(query)
        except GeocodeUnavailableError as e:
            logger.warning(f"Geocoding disabled for this generation: {e.detail}")
            self._available = False
            return None


class ItineraryGenerationAdapter:
    """Chat-driven trip generation."""

    def __init__(
        self,
        store: ItineraryStore,
        generator: Generator,
        geocoder: Geocoder | None = None,
        max_geocode_lookups: int = 25,
    ) -> None:
        self._store = store
        self._generator = generator
        self._geocoder = geocoder
        self._max_geocode_lookups = max_geocode_lookups

    async def generate(
        self,
        ctx: RequestContext,
        user_text: str,
        preferences: UserPreferences | None = None,
    ) -> GenerationResult:
        """Handle one chat message.

        Args:
            ctx: Request context
            user_text: The caller's message
            preferences: Overrides the caller's stored preferences

        Returns:
            Assistant reply, plus the created trip and activities if any

        Raises:
            InputValidationError: If the message is blank
            GenerationFailedError: If the generator fails; no trip is persisted
        """
        text = user_text.strip()
        if not text:
            raise InputValidationError("Message content must not be empty")

        # 1. Record the user's turn
        self._store.create_chat_message(
            ChatMessage(user_id=ctx.user_id, role=ChatRole.user, content=text)
        )

        # 2. Personalize
        prefs = preferences or load_preferences(self._store, ctx)

        # 3. Single generator call
        reply = await self._generator.generate_itinerary(user_text=text, preferences=prefs)

        # 4. Chat-only reply
        if reply.trip is None:
            message = self._store.create_chat_message(
                ChatMessage(
                    user_id=ctx.user_id,
                    role=ChatRole.assistant,
                    content=reply.response or DEFAULT_CHAT_REPLY,
                )
            )
            return GenerationResult(assistant_reply=message)

        # 5-6. Build the trip graph, backfilling coordinates
        trip, activities = await self._build_itinerary(ctx, reply.trip)

        # 7. Atomic batch commit
        self._store.create_itinerary(trip, activities)
        logger.info(
            f"Generated trip {trip.id} to {trip.destination} with {len(activities)} activities"
        )

        # 8. Assistant turn linked to the trip
        message = self._store.create_chat_message(
            ChatMessage(
                user_id=ctx.user_id,
                role=ChatRole.assistant,
                content=reply.response or f"Your trip to {trip.destination} is ready.",
                trip_id=trip.id,
            )
        )
        return GenerationResult(assistant_reply=message, trip=trip, activities=activities)

    async def _build_itinerary(
        self, ctx: RequestContext, generated: GeneratedTrip
    ) -> tuple[Trip, list[Activity]]:
        geocode = _GeocodeBudget(self._geocoder, self._max_geocode_lookups)

        end_date = generated.end_date
        if end_date < generated.start_date:
            logger.warning("Generated trip ends before it starts; clamping end_date")
            end_date = generated.start_date

        trip = Trip(
            user_id=ctx.user_id,
            destination=generated.destination,
            start_date=generated.start_date,
            end_date=end_date,
            budget=generated.budget,
            coordinates=await geocode.resolve(generated.coordinates, generated.destination),
        )

        activities: list[Activity] = []
        for item in generated.activities:
            main = Activity(
                trip_id=trip.id,
                day=item.day,
                order_index=item.order_index,
                title=item.title,
                description=item.description,
                category=item.category,
                time=item.time,
                duration=item.duration,
                location=item.location,
                cost=item.cost,
                energy_level_requirement=EnergyLevel.high,
                is_shadow_option=False,
                coordinates=await geocode.resolve(
                    item.coordinates, _place_query(item.location, trip.destination)
                ),
                image_keyword=item.image_keyword,
            )
            activities.append(main)

            shadow = item.shadow_option
            if shadow is None:
                continue

            activities.append(
                Activity(
                    trip_id=trip.id,
                    day=item.day,
                    order_index=item.order_index,
                    title=shadow.title,
                    description=shadow.description,
                    category=shadow.category,
                    time=shadow.time,
                    duration=shadow.duration,
                    location=shadow.location,
                    cost=shadow.cost,
                    energy_level_requirement=EnergyLevel.low,
                    is_shadow_option=True,
                    parent_activity_id=main.id,
                    coordinates=await geocode.resolve(
                        shadow.coordinates, _place_query(shadow.location, trip.destination)
                    ),
                )
            )

        return trip, activities


def _place_query(location: str, destination: str) -> str | None:
    if not location:
        return None
    if destination.lower() in location.lower():
        return location
    return f"{location}, {destination}"

"""Generator client with OpenAI integration.

Security: Reads API key from settings only, never hardcoded.
Provides a deterministic stub when no key is present, for local runs and tests.
"""

import logging
import re
import time
from datetime import date, timedelta
from typing import Any, Protocol

from openai import AsyncOpenAI, OpenAIError

from vivot.app.config import Settings, get_settings
from vivot.app.errors import GenerationFailedError
from vivot.app.llm.parsing import parse_generator_output
from vivot.app.llm.prompts import (
    build_adaptation_prompt,
    build_care_plan_prompt,
    build_itinerary_system_prompt,
    build_pivot_prompt,
)
from vivot.app.models.activity import Activity
from vivot.app.models.common import ActivityCategory
from vivot.app.models.generated import CarePlan, ItineraryReply, PivotProposalReply
from vivot.app.models.pivot import NewActivityData, PivotContext
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import Trip
from vivot.app.utils.logging import StructuredGeneratorLogger
from vivot.app.utils.metrics import PrometheusGeneratorMetrics

logger = logging.getLogger(__name__)

# Free-text replies longer than this are truncated
MAX_TEXT_REPLY_CHARS = 10000


class Generator(Protocol):
    """Protocol for generator implementations."""

    async def generate_itinerary(
        self, *, user_text: str, preferences: UserPreferences | None
    ) -> ItineraryReply:
        """Turn a chat message into a reply, optionally carrying a trip.

        Raises:
            GenerationFailedError: On transport failure or unparseable output
        """
        ...

    async def propose_alternative(
        self, *, activity: Activity, context: PivotContext
    ) -> PivotProposalReply:
        """Propose one lower-energy replacement for an activity."""
        ...

    async def generate_care_plan(
        self, *, trip: Trip, condition: str, activity: Activity | None
    ) -> CarePlan:
        """Build a wellness micro-itinerary for an unwell traveller."""
        ...

    async def suggest_adaptations(
        self,
        *,
        activities: list[Activity],
        weather: str | None,
        time: str | None,
        budget_remaining: float | None,
    ) -> str:
        """Suggest free-text adaptations of an itinerary."""
        ...


_DESTINATION = re.compile(
    r"\b(?:to|in|visit|visiting)\s+([A-Z][\w'\-]*(?:[ ,]+[A-Z][\w'\-]*)*)"
)
_DAYS = re.compile(r"\b(\d{1,2})[\s-]*days?\b", re.IGNORECASE)


class DeterministicStubClient:
    """Deterministic stub generator (no API key required).

    Replies are built as camelCase payloads and validated through the same
    reply models as real generator output.
    """

    def __init__(self, today: date | None = None) -> None:
        self._today = today

    async def generate_itinerary(
        self, *, user_text: str, preferences: UserPreferences | None
    ) -> ItineraryReply:
        """Plan a fixed-shape trip when the message names a destination."""
        match = _DESTINATION.search(user_text)
        if match is None:
            return ItineraryReply.model_validate(
                {"response": "Tell me where you'd like to go and I'll plan the trip."}
            )

        destination = match.group(1).strip(" ,")
        days_match = _DAYS.search(user_text)
        num_days = min(max(int(days_match.group(1)), 1), 7) if days_match else 3
        start = (self._today or date.today()) + timedelta(days=14)
        end = start + timedelta(days=num_days - 1)
        interest = preferences.interests[0] if preferences and preferences.interests else "culture"

        activities: list[dict[str, Any]] = []
        for day in range(1, num_days + 1):
            activities.append(
                {
                    "day": day,
                    "title": f"{destination} {interest} walk",
                    "description": f"Guided {interest} walk through central {destination}.",
                    "category": "activity",
                    "time": "09:00",
                    "duration": "3 hours",
                    "location": f"{destination} old town",
                    "imageKeyword": f"{destination} old town",
                    "cost": 25,
                    "orderIndex": 0,
                    "shadowOption": {
                        "title": "Slow morning café",
                        "description": "Coffee and people-watching instead of walking.",
                        "category": "restaurant",
                        "time": "09:30",
                        "duration": "1.5 hours",
                        "location": f"{destination} old town",
                        "cost": 10,
                    },
                }
            )
            activities.append(
                {
                    "day": day,
                    "title": "Local lunch",
                    "description": "Regional dishes at a neighbourhood restaurant.",
                    "category": "restaurant",
                    "time": "13:00",
                    "duration": "1.5 hours",
                    "location": f"{destination} market",
                    "imageKeyword": f"{destination} food",
                    "cost": 20,
                    "orderIndex": 1,
                }
            )

        payload = {
            "response": f"Here's a {num_days}-day plan for {destination}.",
            "trip": {
                "destination": destination,
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "budget": 150 * num_days,
                "activities": activities,
            },
        }
        return ItineraryReply.model_validate(payload)

    async def propose_alternative(
        self, *, activity: Activity, context: PivotContext
    ) -> PivotProposalReply:
        """Propose a quiet break at the same location."""
        location = context.location or activity.location or "nearby"
        cost = min(activity.cost, 15.0)
        if context.budget_remaining is not None:
            cost = max(0.0, min(cost, context.budget_remaining))

        return PivotProposalReply(
            proposal=f"Swap {activity.title} for a quieter break while the group recharges.",
            new_activity=NewActivityData(
                title=f"Quiet break near {location}",
                description="A relaxed sit-down stop instead of the planned activity.",
                category=ActivityCategory.activity,
                location=location,
                cost=cost,
                duration="1-2 hours",
            ),
        )

    async def generate_care_plan(
        self, *, trip: Trip, condition: str, activity: Activity | None
    ) -> CarePlan:
        """Return a fixed rest-first plan."""
        return CarePlan.model_validate(
            {
                "condition": condition,
                "personalPlan": [
                    {
                        "title": "Rest at the hotel",
                        "description": "Hydrate and rest for an hour.",
                        "recommendedDuration": "1 hour",
                        "placeType": "accommodation",
                    },
                    {
                        "title": "Pharmacy visit",
                        "description": f"Pick up remedies for: {condition}.",
                        "recommendedDuration": "30 minutes",
                        "placeType": "pharmacy",
                    },
                ],
                "groupPlan": [
                    {
                        "title": activity.title if activity else f"Explore {trip.destination}",
                        "description": "Carry on with a shorter version of the plan.",
                        "recommendedAdjustment": "Shorten by one hour",
                        "reasoning": "Lets the group regroup sooner.",
                    }
                ],
                "recheckInMinutes": 30,
            }
        )

    async def suggest_adaptations(
        self,
        *,
        activities: list[Activity],
        weather: str | None,
        time: str | None,
        budget_remaining: float | None,
    ) -> str:
        """Return fixed adaptation advice."""
        first = activities[0].title if activities else "your next stop"
        return (
            f"1. If the weather turns ({weather or 'unknown'}), move {first} indoors.\n"
            "2. Swap one paid activity for a free walking route.\n"
            "3. Book dinner near your last stop to cut transit time."
        )


class OpenAIClient:
    """OpenAI-backed generator.

    Structured calls use JSON mode. Transport errors and unparseable output
    raise GenerationFailedError; the client never retries on its own.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 60.0,
        max_tokens: int = 4096,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from settings)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
            timeout_seconds: Per-call timeout
            max_tokens: Completion token cap
            client: Optional preconfigured AsyncOpenAI (for testing)
        """
        self.client = client or AsyncOpenAI(
            api_key=api_key, timeout=timeout_seconds, max_retries=0
        )
        self.model = model
        self.max_tokens = max_tokens
        self._metrics = PrometheusGeneratorMetrics()
        self._log = StructuredGeneratorLogger()

    async def generate_itinerary(
        self, *, user_text: str, preferences: UserPreferences | None
    ) -> ItineraryReply:
        """Generate itinerary reply using OpenAI API."""
        messages = [
            {"role": "system", "content": build_itinerary_system_prompt(preferences, date.today())},
            {"role": "user", "content": user_text},
        ]
        raw = await self._complete("itinerary", messages, json_mode=True)
        return self._parse("itinerary", raw, ItineraryReply)

    async def propose_alternative(
        self, *, activity: Activity, context: PivotContext
    ) -> PivotProposalReply:
        """Generate pivot proposal using OpenAI API."""
        messages = [{"role": "user", "content": build_pivot_prompt(activity, context)}]
        raw = await self._complete("pivot", messages, json_mode=True)
        return self._parse("pivot", raw, PivotProposalReply)

    async def generate_care_plan(
        self, *, trip: Trip, condition: str, activity: Activity | None
    ) -> CarePlan:
        """Generate Care Mode plan using OpenAI API."""
        messages = [{"role": "user", "content": build_care_plan_prompt(trip, condition, activity)}]
        raw = await self._complete("care_mode", messages, json_mode=True)
        return self._parse("care_mode", raw, CarePlan)

    async def suggest_adaptations(
        self,
        *,
        activities: list[Activity],
        weather: str | None,
        time: str | None,
        budget_remaining: float | None,
    ) -> str:
        """Generate free-text adaptations using OpenAI API."""
        prompt = build_adaptation_prompt(activities, weather, time, budget_remaining)
        raw = await self._complete("adaptation", [{"role": "user", "content": prompt}])
        text = (raw or "").strip()
        if not text:
            return "No suggestions available"

        if len(text) > MAX_TEXT_REPLY_CHARS:
            logger.warning(
                f"Adaptation reply unexpectedly large ({len(text)} chars), "
                f"truncating to {MAX_TEXT_REPLY_CHARS}"
            )
            text = text[:MAX_TEXT_REPLY_CHARS] + "\n\n[Truncated]"
        return text

    async def _complete(
        self, purpose: str, messages: list[dict[str, str]], json_mode: bool = False
    ) -> str | None:
        """Run one chat completion and return the message content."""
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        start = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=0.7,
                max_tokens=self.max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            reason = type(e).__name__
            self._metrics.record_latency(purpose, "error", latency_ms)
            self._metrics.inc_error(purpose, reason)
            self._log.log_call(purpose, self.model, "error", latency_ms, error_reason=reason)
            raise GenerationFailedError(f"Generator call failed: {reason}") from e

        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_latency(purpose, "success", latency_ms)
        self._log.log_call(purpose, self.model, "success", latency_ms)

        if not response.choices:
            return None
        return response.choices[0].message.content

    def _parse(self, purpose: str, raw: str | None, model: type[Any]) -> Any:
        try:
            return parse_generator_output(raw, model)
        except GenerationFailedError:
            self._metrics.inc_error(purpose, "malformed_output")
            raise


def get_llm_client(settings: Settings | None = None) -> Generator:
    """Factory function to get appropriate generator based on config.

    Returns:
        OpenAIClient if API key is configured, DeterministicStubClient otherwise
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for generation")
        return OpenAIClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            timeout_seconds=settings.generator_timeout_seconds,
            max_tokens=settings.generator_max_tokens,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub client")
    return DeterministicStubClient()

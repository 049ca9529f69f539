"""Test doubles for the generator and geocoder collaborators."""

from typing import Any

from vivot.app.errors import GeocodeUnavailableError
from vivot.app.models.activity import Activity
from vivot.app.models.common import ActivityCategory, Coordinates
from vivot.app.models.generated import CarePlan, ItineraryReply, PivotProposalReply
from vivot.app.models.pivot import NewActivityData, PivotContext
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import Trip


class FakeGenerator:
    """Generator double that records calls and returns canned replies.

    Set `error` to make every call raise it.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.error: Exception | None = None
        self.itinerary_reply = ItineraryReply(response="Where would you like to go?")
        self.pivot_reply = PivotProposalReply(
            proposal="Take a break at a nearby café.",
            new_activity=NewActivityData(
                title="Café break",
                description="Coffee and cake",
                category=ActivityCategory.restaurant,
                location="Old town",
                cost=12.0,
                duration="1 hour",
            ),
        )
        self.care_plan = CarePlan.model_validate(
            {
                "condition": "headache",
                "personalPlan": [{"title": "Rest", "description": "Lie down"}],
                "groupPlan": [{"title": "Museum", "description": "Shorter visit"}],
                "recheckInMinutes": 45,
            }
        )
        self.adaptations = "Move the walk indoors."

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        if self.error is not None:
            raise self.error

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def generate_itinerary(
        self, *, user_text: str, preferences: UserPreferences | None
    ) -> ItineraryReply:
        self._record("generate_itinerary", user_text=user_text, preferences=preferences)
        return self.itinerary_reply

    async def propose_alternative(
        self, *, activity: Activity, context: PivotContext
    ) -> PivotProposalReply:
        self._record("propose_alternative", activity=activity, context=context)
        return self.pivot_reply

    async def generate_care_plan(
        self, *, trip: Trip, condition: str, activity: Activity | None
    ) -> CarePlan:
        self._record("generate_care_plan", trip=trip, condition=condition, activity=activity)
        return self.care_plan

    async def suggest_adaptations(
        self,
        *,
        activities: list[Activity],
        weather: str | None,
        time: str | None,
        budget_remaining: float | None,
    ) -> str:
        self._record(
            "suggest_adaptations",
            activities=activities,
            weather=weather,
            time=time,
            budget_remaining=budget_remaining,
        )
        return self.adaptations


class FakeGeocoder:
    """Geocoder double answering from a fixed table."""

    def __init__(
        self,
        places: dict[str, Coordinates] | None = None,
        unavailable: bool = False,
    ) -> None:
        self.places = places or {}
        self.unavailable = unavailable
        self.queries: list[str] = []

    async def geocode(self, query: str) -> Coordinates | None:
        self.queries.append(query)
        if self.unavailable:
            raise GeocodeUnavailableError("geocoder down")
        return self.places.get(query)



"""Generator output schemas.

The generator returns loosely-typed camelCase JSON. These models coerce it
into trusted shapes: a malformed activity or shadow option is dropped with
a warning, a malformed trip payload degrades to a chat-only reply, and
anything else that fails validation is rejected by the caller.
"""

import logging
from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from vivot.app.models.common import ActivityCategory, Coordinates
from vivot.app.models.pivot import NewActivityData

logger = logging.getLogger(__name__)


class GeneratedModel(BaseModel):
    """Base for generator payloads: camelCase input, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _coerce_coordinates(value: Any) -> Coordinates | None:
    if value is None or isinstance(value, Coordinates):
        return value
    try:
        return Coordinates.model_validate(value)
    except ValidationError:
        return None


def _coerce_category(value: Any) -> ActivityCategory:
    try:
        return ActivityCategory(str(value).lower())
    except ValueError:
        # Generators invent categories such as "relaxation"
        return ActivityCategory.activity


def _coerce_cost(value: Any) -> Any:
    if value is None:
        return 0.0
    return value


GeneratedCategory = Annotated[ActivityCategory, BeforeValidator(_coerce_category)]
GeneratedCoordinates = Annotated[Coordinates | None, BeforeValidator(_coerce_coordinates)]
GeneratedCost = Annotated[float, BeforeValidator(_coerce_cost), Field(ge=0)]


class GeneratedShadowOption(GeneratedModel):
    """Low-energy alternative attached to a generated activity."""

    title: str = Field(..., min_length=1)
    description: str | None = None
    category: GeneratedCategory = ActivityCategory.activity
    time: str = ""
    duration: str | None = None
    location: str = ""
    coordinates: GeneratedCoordinates = None
    cost: GeneratedCost = 0.0


class GeneratedActivity(GeneratedModel):
    """One main itinerary entry as emitted by the generator."""

    day: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    description: str | None = None
    category: GeneratedCategory = ActivityCategory.activity
    time: str = ""
    duration: str | None = None
    location: str = ""
    coordinates: GeneratedCoordinates = None
    image_keyword: str | None = None
    cost: GeneratedCost = 0.0
    order_index: int = Field(default=0, ge=0)
    shadow_option: GeneratedShadowOption | None = None

    @field_validator("shadow_option", mode="before")
    @classmethod
    def drop_malformed_shadow(cls, value: Any) -> Any:
        """Keep the main activity even if its shadow option is unusable."""
        if value is None:
            return None
        try:
            return GeneratedShadowOption.model_validate(value)
        except ValidationError as e:
            logger.warning(f"Dropping malformed shadow option: {e.error_count()} error(s)")
            return None


class GeneratedTrip(GeneratedModel):
    """Trip payload of an itinerary reply."""

    destination: str = Field(..., min_length=1)
    coordinates: GeneratedCoordinates = None
    start_date: date
    end_date: date
    budget: float = Field(..., ge=0)
    activities: list[GeneratedActivity] = Field(default_factory=list)

    @field_validator("activities", mode="before")
    @classmethod
    def drop_malformed_activities(cls, value: Any) -> list[GeneratedActivity]:
        """Validate activities one by one so a single bad entry is not fatal."""
        if not isinstance(value, list):
            return []

        activities: list[GeneratedActivity] = []
        for index, raw in enumerate(value):
            try:
                activities.append(GeneratedActivity.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    f"Dropping malformed generated activity #{index}: {e.error_count()} error(s)"
                )
        return activities


class ItineraryReply(GeneratedModel):
    """Generator reply to a chat message, optionally carrying a trip."""

    response: str = ""
    trip: GeneratedTrip | None = None

    @field_validator("trip", mode="before")
    @classmethod
    def drop_malformed_trip(cls, value: Any) -> Any:
        if value is None:
            return None
        try:
            return GeneratedTrip.model_validate(value)
        except ValidationError as e:
            logger.warning(f"Generated trip payload rejected: {e.error_count()} error(s)")
            return None


class PivotProposalReply(GeneratedModel):
    """Generator reply to a pivot request."""

    proposal: str = Field(..., min_length=1)
    new_activity: NewActivityData

    @field_validator("new_activity", mode="before")
    @classmethod
    def coerce_category(cls, value: Any) -> Any:
        if isinstance(value, dict) and "category" in value:
            value = {**value, "category": _coerce_category(value["category"])}
        if isinstance(value, dict) and value.get("cost") is None:
            value = {**value, "cost": 0.0}
        return value


class CarePersonalItem(GeneratedModel):
    """Calm activity for the participant who is unwell."""

    title: str = Field(..., min_length=1)
    description: str = ""
    recommended_duration: str | None = None
    place_type: str | None = None
    image_keyword: str | None = None
    coordinates: GeneratedCoordinates = None


class CareGroupItem(GeneratedModel):
    """Minimal adjustment for the rest of the group."""

    title: str = Field(..., min_length=1)
    description: str = ""
    recommended_adjustment: str | None = None
    reasoning: str | None = None
    image_keyword: str | None = None


class CarePlan(GeneratedModel):
    """Care Mode wellness micro-itinerary."""

    condition: str
    personal_plan: list[CarePersonalItem] = Field(default_factory=list)
    group_plan: list[CareGroupItem] = Field(default_factory=list)
    recheck_in_minutes: int = Field(default=30, ge=1)

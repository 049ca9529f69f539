"""Activity models - main itinerary entries and their shadow options."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vivot.app.models.common import ActivityCategory, Coordinates, EnergyLevel, new_id

# Fields a generic patch may touch. Identity fields (id, trip_id,
# parent_activity_id) are never patchable.
ACTIVITY_UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "category",
        "time",
        "duration",
        "location",
        "cost",
        "completed",
        "energy_level_requirement",
        "is_shadow_option",
        "image_url",
    }
)

_NULLABLE_FIELDS = frozenset({"description", "duration", "image_url"})


class Activity(BaseModel):
    """Single itinerary entry.

    A shadow option (`is_shadow_option=True`) is a low-energy alternative to
    the main activity referenced by `parent_activity_id`. The reference is
    non-owning and always intra-trip.
    """

    id: str = Field(default_factory=new_id)
    trip_id: str
    day: int = Field(..., ge=1)
    order_index: int = Field(default=0, ge=0)
    title: str = Field(..., min_length=1)
    description: str | None = None
    category: ActivityCategory = ActivityCategory.activity
    time: str = ""
    duration: str | None = None
    location: str = ""
    cost: float = Field(default=0.0, ge=0)
    completed: bool = False
    energy_level_requirement: EnergyLevel = EnergyLevel.high
    is_shadow_option: bool = False
    parent_activity_id: str | None = None
    coordinates: Coordinates | None = None
    image_url: str | None = None
    image_keyword: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class ActivityCreate(BaseModel):
    """Request body for POST /activities."""

    trip_id: str
    day: int = Field(..., ge=1)
    order_index: int = Field(default=0, ge=0)
    title: str = Field(..., min_length=1)
    description: str | None = None
    category: ActivityCategory = ActivityCategory.activity
    time: str = ""
    duration: str | None = None
    location: str = ""
    cost: float = Field(default=0.0, ge=0)
    energy_level_requirement: EnergyLevel = EnergyLevel.high
    is_shadow_option: bool = False
    parent_activity_id: str | None = None
    coordinates: Coordinates | None = None
    image_url: str | None = None
    image_keyword: str | None = None

    def to_activity(self) -> Activity:
        return Activity(**self.model_dump())


class ActivityUpdate(BaseModel):
    """Request body for PATCH /activities/{id}.

    Unknown keys (including identity fields) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: ActivityCategory | None = None
    time: str | None = None
    duration: str | None = None
    location: str | None = None
    cost: float | None = Field(default=None, ge=0)
    completed: bool | None = None
    energy_level_requirement: EnergyLevel | None = None
    is_shadow_option: bool | None = None
    image_url: str | None = None

    def to_updates(self) -> dict[str, Any]:
        """Fields the client actually sent; null only where the field is nullable."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in _NULLABLE_FIELDS
        }

"""Trip models."""

from datetime import date, datetime

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from vivot.app.models.common import Coordinates, TripStatus, new_id

TRIP_UPDATABLE_FIELDS = frozenset(
    {"destination", "start_date", "end_date", "budget", "status", "coordinates", "image_url"}
)


class Trip(BaseModel):
    """A trip owned by a single caller identity.

    `spent` is derived from the trip's budget items and written only by the
    budget ledger.
    """

    id: str = Field(default_factory=new_id)
    user_id: str
    destination: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    budget: float = Field(..., ge=0)
    spent: float = 0.0
    status: TripStatus = TripStatus.planning
    coordinates: Coordinates | None = None
    image_url: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def budget_remaining(self) -> float:
        return self.budget - self.spent


class TripCreate(BaseModel):
    """Request body for manual trip creation."""

    destination: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    budget: float = Field(..., ge=0)
    coordinates: Coordinates | None = None
    image_url: str | None = None

    @field_validator("end_date")
    @classmethod
    def validate_end_after_start(cls, v: date, info: ValidationInfo) -> date:
        """Ensure end >= start."""
        if "start_date" in info.data and v < info.data["start_date"]:
            raise ValueError("end_date must be >= start_date")
        return v

    def to_trip(self, user_id: str) -> Trip:
        return Trip(user_id=user_id, **self.model_dump())


class TripUpdate(BaseModel):
    """Partial trip update. `spent` is never accepted."""

    destination: str | None = Field(default=None, min_length=1)
    start_date: date | None = None
    end_date: date | None = None
    budget: float | None = Field(default=None, ge=0)
    status: TripStatus | None = None
    coordinates: Coordinates | None = None
    image_url: str | None = None

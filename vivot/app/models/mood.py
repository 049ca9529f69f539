"""Mood reading models."""

from datetime import datetime

from pydantic import BaseModel, Field

from vivot.app.models.common import EnergyLevel, new_id


class MoodReading(BaseModel):
    """Immutable energy reading submitted by one participant."""

    id: str = Field(default_factory=new_id)
    trip_id: str
    user_id: str
    energy_level: EnergyLevel
    timestamp: datetime = Field(default_factory=datetime.now)


class MoodReadingCreate(BaseModel):
    """Request body for POST /trips/{trip_id}/mood."""

    energy_level: EnergyLevel


class MoodResult(BaseModel):
    """Recorded reading plus the pivot decision it produced."""

    reading: MoodReading
    should_pivot: bool

"""Common types and enums shared across all models."""

import uuid
from enum import Enum

from pydantic import BaseModel, Field


def new_id() -> str:
    """Generate a new entity identifier."""
    return str(uuid.uuid4())


class Coordinates(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def is_unresolved(self) -> bool:
        """Generators emit (0, 0) as a placeholder for unknown coordinates."""
        return self.lat == 0 and self.lng == 0


class EnergyLevel(str, Enum):
    """Coarse group energy signal."""

    low = "low"
    medium = "medium"
    high = "high"


class ActivityCategory(str, Enum):
    """Kind of itinerary entry."""

    activity = "activity"
    restaurant = "restaurant"
    accommodation = "accommodation"
    transport = "transport"


class TripStatus(str, Enum):
    """Trip lifecycle status (managed by the client)."""

    planning = "planning"
    active = "active"
    completed = "completed"


class PivotTrigger(str, Enum):
    """What caused a pivot to be committed."""

    user_consensus = "user_consensus"


class ChatRole(str, Enum):
    """Chat message author."""

    user = "user"
    assistant = "assistant"

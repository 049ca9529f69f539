"""User preference models used to personalize generation."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from vivot.app.models.common import new_id

BudgetTier = Literal["low", "medium", "high", "luxury"]
Pace = Literal["relaxed", "moderate", "fast-paced"]
TravelStyle = Literal["solo", "couple", "family", "group"]


class UserPreferences(BaseModel):
    """Stored travel preferences for one caller."""

    id: str = Field(default_factory=new_id)
    user_id: str
    budget: BudgetTier = "medium"
    pace: Pace = "moderate"
    interests: list[str] = Field(default_factory=lambda: ["food", "culture"])
    dietary: list[str] = Field(default_factory=lambda: ["none"])
    travel_style: TravelStyle = "solo"
    updated_at: datetime = Field(default_factory=datetime.now)


class PreferencesUpdate(BaseModel):
    """Partial preferences update."""

    budget: BudgetTier | None = None
    pace: Pace | None = None
    interests: list[str] | None = None
    dietary: list[str] | None = None
    travel_style: TravelStyle | None = None

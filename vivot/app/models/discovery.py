"""Discovery catalog models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from vivot.app.models.common import new_id

# A place is featured when rated at least this high; at most FEATURED_LIMIT are shown
FEATURED_MIN_RATING = 4.3
FEATURED_LIMIT = 6


class Discovery(BaseModel):
    """A curated place suggestion, shared by every caller."""

    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1)
    description: str
    category: Literal["hidden-gem", "local-experience", "popular", "adventure"]
    location: str
    image_url: str
    rating: float = Field(default=4.5, ge=0, le=5)
    sentiment: Literal["highly-rated", "hidden-gem", "trending", "local-favorite"]
    cost: Literal["free", "low", "medium", "high"]
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

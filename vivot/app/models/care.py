"""Care Mode and adaptation request models."""

from pydantic import BaseModel, Field


class CareModeRequest(BaseModel):
    """Request body for POST /trips/{trip_id}/care-mode."""

    condition: str = Field(..., min_length=1)
    current_activity_id: str | None = None


class AdaptationRequest(BaseModel):
    """Request body for POST /trips/{trip_id}/adapt."""

    weather: str | None = None
    time: str | None = None
    budget_remaining: float | None = None


class AdaptationResponse(BaseModel):
    """Free-text adaptation suggestions."""

    suggestions: str

"""Chat models."""

from datetime import datetime

from pydantic import BaseModel, Field

from vivot.app.models.activity import Activity
from vivot.app.models.common import ChatRole, new_id
from vivot.app.models.trip import Trip


class ChatMessage(BaseModel):
    """One chat turn."""

    id: str = Field(default_factory=new_id)
    user_id: str
    role: ChatRole
    content: str
    trip_id: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class ChatSendRequest(BaseModel):
    """Request body for POST /chat/send."""

    content: str = Field(..., min_length=1)


class ChatSendResponse(BaseModel):
    """Assistant reply plus the trip it created, if any."""

    message: ChatMessage
    trip: Trip | None = None
    activities: list[Activity] = Field(default_factory=list)

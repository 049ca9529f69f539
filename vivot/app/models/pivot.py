"""Mood Pivot models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from vivot.app.models.activity import Activity
from vivot.app.models.common import ActivityCategory, PivotTrigger, new_id


class PivotState(str, Enum):
    """State of one pivot attempt for a (trip, activity) pair."""

    idle = "idle"
    proposed = "proposed"
    committed = "committed"


class PivotContext(BaseModel):
    """Situational context supplied with a pivot request."""

    location: str | None = None
    time: str | None = None
    budget_remaining: float | None = None
    group_mood: str | None = None


class NewActivityData(BaseModel):
    """Replacement values applied to the pivoted activity.

    `id` is set when the replacement is an existing shadow option.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str = Field(..., min_length=1)
    description: str | None = None
    category: ActivityCategory = ActivityCategory.activity
    location: str = ""
    cost: float = Field(default=0.0, ge=0)
    duration: str | None = None

    @classmethod
    def from_activity(cls, activity: Activity) -> "NewActivityData":
        return cls(
            id=activity.id,
            title=activity.title,
            description=activity.description,
            category=activity.category,
            location=activity.location,
            cost=activity.cost,
            duration=activity.duration,
        )


class PivotProposal(BaseModel):
    """A computed, not yet applied, replacement."""

    proposal: str
    new_activity: NewActivityData
    is_pre_planned: bool
    state: PivotState = PivotState.proposed


class PivotRequest(BaseModel):
    """Request body for POST /trips/{trip_id}/pivot."""

    current_activity_id: str
    location: str | None = None
    time: str | None = None
    budget_remaining: float | None = None
    group_mood: str | None = None

    def context(self) -> PivotContext:
        return PivotContext(
            location=self.location,
            time=self.time,
            budget_remaining=self.budget_remaining,
            group_mood=self.group_mood,
        )


class ConfirmPivotRequest(BaseModel):
    """Request body for POST /trips/{trip_id}/pivot/confirm."""

    old_activity_id: str
    new_activity_data: NewActivityData
    reason: str | None = None


class PivotLog(BaseModel):
    """Append-only audit entry for a committed pivot."""

    id: str = Field(default_factory=new_id)
    trip_id: str
    previous_activity_id: str
    new_activity_id: str | None = None
    reason: str
    trigger: PivotTrigger = PivotTrigger.user_consensus
    created_at: datetime = Field(default_factory=datetime.now)


class PivotCommit(BaseModel):
    """Result of a confirmed pivot."""

    activity: Activity
    log: PivotLog
    state: PivotState = PivotState.committed

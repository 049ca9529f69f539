"""Models package - re-exports for convenience."""

from vivot.app.models.activity import (
    ACTIVITY_UPDATABLE_FIELDS,
    Activity,
    ActivityCreate,
    ActivityUpdate,
)
from vivot.app.models.budget import BudgetItem, BudgetItemCreate
from vivot.app.models.care import AdaptationRequest, AdaptationResponse, CareModeRequest
from vivot.app.models.chat import ChatMessage, ChatSendRequest, ChatSendResponse
from vivot.app.models.common import (
    ActivityCategory,
    ChatRole,
    Coordinates,
    EnergyLevel,
    PivotTrigger,
    TripStatus,
    new_id,
)
from vivot.app.models.discovery import FEATURED_LIMIT, FEATURED_MIN_RATING, Discovery
from vivot.app.models.generated import (
    CareGroupItem,
    CarePersonalItem,
    CarePlan,
    GeneratedActivity,
    GeneratedShadowOption,
    GeneratedTrip,
    ItineraryReply,
    PivotProposalReply,
)
from vivot.app.models.mood import MoodReading, MoodReadingCreate, MoodResult
from vivot.app.models.pivot import (
    ConfirmPivotRequest,
    NewActivityData,
    PivotCommit,
    PivotContext,
    PivotLog,
    PivotProposal,
    PivotRequest,
    PivotState,
)
from vivot.app.models.preferences import PreferencesUpdate, UserPreferences
from vivot.app.models.trip import TRIP_UPDATABLE_FIELDS, Trip, TripCreate, TripUpdate

__all__ = [
    # Common
    "new_id",
    "Coordinates",
    "EnergyLevel",
    "ActivityCategory",
    "TripStatus",
    "PivotTrigger",
    "ChatRole",
    # Trips and itinerary
    "Trip",
    "TripCreate",
    "TripUpdate",
    "TRIP_UPDATABLE_FIELDS",
    "Activity",
    "ActivityCreate",
    "ActivityUpdate",
    "ACTIVITY_UPDATABLE_FIELDS",
    # Budget
    "BudgetItem",
    "BudgetItemCreate",
    # Mood and pivot
    "MoodReading",
    "MoodReadingCreate",
    "MoodResult",
    "PivotState",
    "PivotContext",
    "PivotRequest",
    "NewActivityData",
    "PivotProposal",
    "ConfirmPivotRequest",
    "PivotLog",
    "PivotCommit",
    # Preferences and chat
    "UserPreferences",
    "PreferencesUpdate",
    "ChatMessage",
    "ChatSendRequest",
    "ChatSendResponse",
    # Discoveries
    "Discovery",
    "FEATURED_MIN_RATING",
    "FEATURED_LIMIT",
    # Care Mode and adaptation
    "CareModeRequest",
    "AdaptationRequest",
    "AdaptationResponse",
    # Generator payloads
    "ItineraryReply",
    "GeneratedTrip",
    "GeneratedActivity",
    "GeneratedShadowOption",
    "PivotProposalReply",
    "CarePlan",
    "CarePersonalItem",
    "CareGroupItem",
]

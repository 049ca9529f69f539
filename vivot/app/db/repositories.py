"""Repository protocol interfaces for data access."""

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from vivot.app.models.activity import Activity
from vivot.app.models.budget import BudgetItem
from vivot.app.models.chat import ChatMessage
from vivot.app.models.discovery import Discovery
from vivot.app.models.mood import MoodReading
from vivot.app.models.pivot import PivotLog
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import Trip

logger = logging.getLogger(__name__)


def sanitize_updates(
    updates: dict[str, Any], allowed: frozenset[str], entity: str
) -> dict[str, Any]:
    """Keep allow-listed keys only, warning about the rest."""
    sanitized: dict[str, Any] = {}
    for key, value in updates.items():
        if key in allowed:
            sanitized[key] = value
        else:
            logger.warning(f"Blocked update to {entity} field: {key}")
    return sanitized


class ItineraryStore(Protocol):
    """Authoritative store for trips and everything a trip owns.

    Pure CRUD and trip-scoped queries; business rules live in the services.
    Reads of absent ids return None, updates and deletes of absent ids raise
    NotFoundError.
    """

    def transaction(self) -> AbstractContextManager[None]:
        """Group mutations into one atomic, serialized unit.

        Nested transactions join the outermost one. Any exception rolls back
        every mutation made inside the outermost block.
        """
        ...

    # Trips

    def create_trip(self, trip: Trip) -> Trip:
        """Insert a new trip."""
        ...

    def get_trip(self, trip_id: str) -> Trip | None:
        """Get trip by ID."""
        ...

    def list_trips(self, user_id: str) -> list[Trip]:
        """List a caller's trips, newest first."""
        ...

    def update_trip(self, trip_id: str, updates: dict[str, Any]) -> Trip:
        """Apply allow-listed trip fields.

        Args:
            trip_id: Trip ID
            updates: Field values; keys outside TRIP_UPDATABLE_FIELDS are dropped

        Returns:
            Updated trip
        """
        ...

    def set_trip_spent(self, trip_id: str, spent: float) -> Trip:
        """Write the derived spent amount (budget ledger only)."""
        ...

    def delete_trip(self, trip_id: str) -> None:
        """Delete a trip and everything it owns."""
        ...

    # Activities

    def create_activity(self, activity: Activity) -> Activity:
        """Insert a new activity."""
        ...

    def create_itinerary(self, trip: Trip, activities: list[Activity]) -> Trip:
        """Insert a trip and all of its activities in one atomic batch."""
        ...

    def get_activity(self, activity_id: str) -> Activity | None:
        """Get activity by ID (main or shadow)."""
        ...

    def list_activities(self, trip_id: str) -> list[Activity]:
        """Main itinerary, shadows excluded, ordered by (day, order_index)."""
        ...

    def list_shadow_activities(self, trip_id: str) -> list[Activity]:
        """Shadow options only, ordered by (day, order_index)."""
        ...

    def update_activity(self, activity_id: str, updates: dict[str, Any]) -> Activity:
        """Apply allow-listed activity fields.

        Args:
            activity_id: Activity ID
            updates: Field values; keys outside ACTIVITY_UPDATABLE_FIELDS are dropped

        Returns:
            Updated activity
        """
        ...

    def delete_activity(self, activity_id: str) -> None:
        """Delete a single activity."""
        ...

    # Budget items

    def create_budget_item(self, item: BudgetItem) -> BudgetItem:
        """Insert a budget item."""
        ...

    def get_budget_item(self, item_id: str) -> BudgetItem | None:
        """Get budget item by ID."""
        ...

    def list_budget_items(self, trip_id: str) -> list[BudgetItem]:
        """Budget items for a trip, newest date first."""
        ...

    def delete_budget_item(self, item_id: str) -> None:
        """Delete a budget item."""
        ...

    # Mood readings and pivot logs (append-only)

    def create_mood_reading(self, reading: MoodReading) -> MoodReading:
        """Append a mood reading."""
        ...

    def list_mood_readings(self, trip_id: str) -> list[MoodReading]:
        """Mood readings for a trip, newest first."""
        ...

    def create_pivot_log(self, log: PivotLog) -> PivotLog:
        """Append a pivot log entry."""
        ...

    def list_pivot_logs(self, trip_id: str) -> list[PivotLog]:
        """Pivot logs for a trip, newest first."""
        ...

    # Preferences and chat

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Get a caller's stored preferences."""
        ...

    def save_preferences(self, prefs: UserPreferences) -> UserPreferences:
        """Insert or replace a caller's preferences."""
        ...

    def create_chat_message(self, message: ChatMessage) -> ChatMessage:
        """Append a chat message."""
        ...

    def list_chat_messages(self, user_id: str) -> list[ChatMessage]:
        """Chat history for a caller, oldest first."""
        ...

    # Discovery catalog (not owned by any caller)

    def create_discovery(self, discovery: Discovery) -> Discovery:
        """Add a place to the catalog."""
        ...

    def list_discoveries(self) -> list[Discovery]:
        """Whole catalog, newest first."""
        ...

    def list_featured_discoveries(self, min_rating: float, limit: int) -> list[Discovery]:
        """Places rated at least min_rating, newest first, at most limit."""
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...

"""In-memory implementations of repository interfaces."""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, TypeVar

from pydantic import BaseModel

from vivot.app.db.repositories import RetryAfter, sanitize_updates
from vivot.app.errors import NotFoundError
from vivot.app.models.activity import ACTIVITY_UPDATABLE_FIELDS, Activity
from vivot.app.models.budget import BudgetItem
from vivot.app.models.chat import ChatMessage
from vivot.app.models.discovery import Discovery
from vivot.app.models.mood import MoodReading
from vivot.app.models.pivot import PivotLog
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import TRIP_UPDATABLE_FIELDS, Trip

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _newest_first(records: Iterable[M], key: str) -> list[M]:
    """Sort by a timestamp attribute, newest first; ties by reverse insertion order."""
    indexed = list(enumerate(records))
    indexed.sort(key=lambda pair: (getattr(pair[1], key), pair[0]), reverse=True)
    return [record for _, record in indexed]


class InMemoryItineraryStore:
    """In-memory implementation of ItineraryStore.

    Records are copied on the way in and out so callers never alias stored
    state. A re-entrant lock serializes mutations; `transaction()` snapshots
    the tables and restores them if the block raises.
    """

    def __init__(self) -> None:
        self._trips: dict[str, Trip] = {}
        self._activities: dict[str, Activity] = {}
        self._budget_items: dict[str, BudgetItem] = {}
        self._mood_readings: dict[str, MoodReading] = {}
        self._pivot_logs: dict[str, PivotLog] = {}
        self._preferences: dict[str, UserPreferences] = {}
        self._chat_messages: dict[str, ChatMessage] = {}
        self._discoveries: dict[str, Discovery] = {}
        self._lock = threading.RLock()
        self._depth = 0

    def _tables(self) -> dict[str, dict[str, Any]]:
        return {
            "_trips": self._trips,
            "_activities": self._activities,
            "_budget_items": self._budget_items,
            "_mood_readings": self._mood_readings,
            "_pivot_logs": self._pivot_logs,
            "_preferences": self._preferences,
            "_chat_messages": self._chat_messages,
            "_discoveries": self._discoveries,
        }

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run a block atomically; nested blocks join the outer one."""
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            # Stored models are replaced, never mutated, so shallow copies suffice
            snapshot = {name: dict(table) for name, table in self._tables().items()}
            self._depth = 1
            try:
                yield
            except BaseException:
                for name, table in snapshot.items():
                    setattr(self, name, table)
                logger.warning("Transaction rolled back")
                raise
            finally:
                self._depth = 0

    # Trips

    def create_trip(self, trip: Trip) -> Trip:
        """Insert a new trip."""
        with self._lock:
            self._trips[trip.id] = trip.model_copy(deep=True)
            return trip.model_copy(deep=True)

    def get_trip(self, trip_id: str) -> Trip | None:
        """Get trip by ID."""
        trip = self._trips.get(trip_id)
        return trip.model_copy(deep=True) if trip else None

    def list_trips(self, user_id: str) -> list[Trip]:
        """List a caller's trips, newest first."""
        trips = [t for t in self._trips.values() if t.user_id == user_id]
        return [t.model_copy(deep=True) for t in _newest_first(trips, "created_at")]

    def update_trip(self, trip_id: str, updates: dict[str, Any]) -> Trip:
        """Apply allow-listed trip fields."""
        with self._lock:
            existing = self._require(self._trips, trip_id, "Trip")
            sanitized = sanitize_updates(updates, TRIP_UPDATABLE_FIELDS, "trip")
            updated = Trip.model_validate({**existing.model_dump(), **sanitized})
            self._trips[trip_id] = updated
            return updated.model_copy(deep=True)

    def set_trip_spent(self, trip_id: str, spent: float) -> Trip:
        """Write the derived spent amount."""
        with self._lock:
            existing = self._require(self._trips, trip_id, "Trip")
            updated = existing.model_copy(update={"spent": spent})
            self._trips[trip_id] = updated
            return updated.model_copy(deep=True)

    def delete_trip(self, trip_id: str) -> None:
        """Delete a trip and cascade to everything it owns."""
        with self._lock:
            self._require(self._trips, trip_id, "Trip")
            del self._trips[trip_id]
            for table in (
                self._activities,
                self._budget_items,
                self._mood_readings,
                self._pivot_logs,
            ):
                for record_id in [k for k, v in table.items() if v.trip_id == trip_id]:
                    del table[record_id]

    # Activities

    def create_activity(self, activity: Activity) -> Activity:
        """Insert a new activity."""
        with self._lock:
            self._activities[activity.id] = activity.model_copy(deep=True)
            return activity.model_copy(deep=True)

    def create_itinerary(self, trip: Trip, activities: list[Activity]) -> Trip:
        """Insert a trip and its activities as one batch."""
        with self.transaction():
            created = self.create_trip(trip)
            for activity in activities:
                self.create_activity(activity)
            return created

    def get_activity(self, activity_id: str) -> Activity | None:
        """Get activity by ID."""
        activity = self._activities.get(activity_id)
        return activity.model_copy(deep=True) if activity else None

    def list_activities(self, trip_id: str) -> list[Activity]:
        """Main itinerary ordered by (day, order_index)."""
        return self._ordered_activities(trip_id, shadow=False)

    def list_shadow_activities(self, trip_id: str) -> list[Activity]:
        """Shadow options ordered by (day, order_index)."""
        return self._ordered_activities(trip_id, shadow=True)

    def _ordered_activities(self, trip_id: str, *, shadow: bool) -> list[Activity]:
        activities = [
            a
            for a in self._activities.values()
            if a.trip_id == trip_id and a.is_shadow_option == shadow
        ]
        activities.sort(key=lambda a: (a.day, a.order_index))
        return [a.model_copy(deep=True) for a in activities]

    def update_activity(self, activity_id: str, updates: dict[str, Any]) -> Activity:
        """Apply allow-listed activity fields."""
        with self._lock:
            existing = self._require(self._activities, activity_id, "Activity")
            sanitized = sanitize_updates(updates, ACTIVITY_UPDATABLE_FIELDS, "activity")
            updated = Activity.model_validate({**existing.model_dump(), **sanitized})
            self._activities[activity_id] = updated
            return updated.model_copy(deep=True)

    def delete_activity(self, activity_id: str) -> None:
        """Delete a single activity."""
        with self._lock:
            self._require(self._activities, activity_id, "Activity")
            del self._activities[activity_id]

    # Budget items

    def create_budget_item(self, item: BudgetItem) -> BudgetItem:
        """Insert a budget item."""
        with self._lock:
            self._budget_items[item.id] = item.model_copy(deep=True)
            return item.model_copy(deep=True)

    def get_budget_item(self, item_id: str) -> BudgetItem | None:
        """Get budget item by ID."""
        item = self._budget_items.get(item_id)
        return item.model_copy(deep=True) if item else None

    def list_budget_items(self, trip_id: str) -> list[BudgetItem]:
        """Budget items for a trip, newest date first."""
        items = [i for i in self._budget_items.values() if i.trip_id == trip_id]
        indexed = list(enumerate(items))
        indexed.sort(key=lambda pair: (pair[1].date, pair[1].created_at, pair[0]), reverse=True)
        return [item.model_copy(deep=True) for _, item in indexed]

    def delete_budget_item(self, item_id: str) -> None:
        """Delete a budget item."""
        with self._lock:
            self._require(self._budget_items, item_id, "Budget item")
            del self._budget_items[item_id]

    # Mood readings and pivot logs

    def create_mood_reading(self, reading: MoodReading) -> MoodReading:
        """Append a mood reading."""
        with self._lock:
            self._mood_readings[reading.id] = reading.model_copy(deep=True)
            return reading.model_copy(deep=True)

    def list_mood_readings(self, trip_id: str) -> list[MoodReading]:
        """Mood readings for a trip, newest first."""
        readings = [r for r in self._mood_readings.values() if r.trip_id == trip_id]
        return [r.model_copy(deep=True) for r in _newest_first(readings, "timestamp")]

    def create_pivot_log(self, log: PivotLog) -> PivotLog:
        """Append a pivot log entry."""
        with self._lock:
            self._pivot_logs[log.id] = log.model_copy(deep=True)
            return log.model_copy(deep=True)

    def list_pivot_logs(self, trip_id: str) -> list[PivotLog]:
        """Pivot logs for a trip, newest first."""
        logs = [entry for entry in self._pivot_logs.values() if entry.trip_id == trip_id]
        return [entry.model_copy(deep=True) for entry in _newest_first(logs, "created_at")]

    # Preferences and chat

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Get a caller's stored preferences."""
        prefs = self._preferences.get(user_id)
        return prefs.model_copy(deep=True) if prefs else None

    def save_preferences(self, prefs: UserPreferences) -> UserPreferences:
        """Insert or replace a caller's preferences."""
        with self._lock:
            stored = prefs.model_copy(update={"updated_at": datetime.now()}, deep=True)
            self._preferences[prefs.user_id] = stored
            return stored.model_copy(deep=True)

    def create_chat_message(self, message: ChatMessage) -> ChatMessage:
        """Append a chat message."""
        with self._lock:
            self._chat_messages[message.id] = message.model_copy(deep=True)
            return message.model_copy(deep=True)

    def list_chat_messages(self, user_id: str) -> list[ChatMessage]:
        """Chat history for a caller, oldest first."""
        messages = [m for m in self._chat_messages.values() if m.user_id == user_id]
        return [m.model_copy(deep=True) for m in reversed(_newest_first(messages, "created_at"))]

    # Discovery catalog

    def create_discovery(self, discovery: Discovery) -> Discovery:
        """Add a place to the catalog."""
        with self._lock:
            self._discoveries[discovery.id] = discovery.model_copy(deep=True)
            return discovery.model_copy(deep=True)

    def list_discoveries(self) -> list[Discovery]:
        """Whole catalog, newest first."""
        newest = _newest_first(self._discoveries.values(), "created_at")
        return [d.model_copy(deep=True) for d in newest]

    def list_featured_discoveries(self, min_rating: float, limit: int) -> list[Discovery]:
        """Places rated at least min_rating, newest first, at most limit."""
        return [d for d in self.list_discoveries() if d.rating >= min_rating][:limit]

    @staticmethod
    def _require(table: dict[str, M], record_id: str, entity: str) -> M:
        record = table.get(record_id)
        if record is None:
            raise NotFoundError(f"{entity} {record_id} not found")
        return record


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        if key in self._windows:
            window_start, count = self._windows[key]
            window_end = window_start + timedelta(seconds=self._window_seconds)

            if now < window_end:
                if count >= self._max_requests:
                    return RetryAfter(seconds=max(1, int((window_end - now).total_seconds())))
                self._windows[key] = (window_start, count + 1)
                return None

        # First request, or the previous window expired
        self._windows[key] = (now, 1)
        return None

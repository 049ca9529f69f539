"""SQL implementation of the itinerary store."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy.orm import Query, Session

from vivot.app.db.models import (
    ActivityRow,
    Base,
    BudgetItemRow,
    ChatMessageRow,
    DiscoveryRow,
    MoodReadingRow,
    PivotLogRow,
    PreferencesRow,
    TripRow,
)
from vivot.app.db.repositories import sanitize_updates
from vivot.app.errors import NotFoundError
from vivot.app.models.activity import ACTIVITY_UPDATABLE_FIELDS, Activity
from vivot.app.models.budget import BudgetItem
from vivot.app.models.chat import ChatMessage
from vivot.app.models.common import Coordinates
from vivot.app.models.discovery import Discovery
from vivot.app.models.mood import MoodReading
from vivot.app.models.pivot import PivotLog
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import TRIP_UPDATABLE_FIELDS, Trip

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Base)


def _coords(lat: float | None, lng: float | None) -> Coordinates | None:
    if lat is None or lng is None:
        return None
    return Coordinates(lat=lat, lng=lng)


def _trip_from_row(row: TripRow) -> Trip:
    return Trip(
        id=row.id,
        user_id=row.user_id,
        destination=row.destination,
        start_date=row.start_date,
        end_date=row.end_date,
        budget=row.budget,
        spent=row.spent,
        status=row.status,
        coordinates=_coords(row.lat, row.lng),
        image_url=row.image_url,
        created_at=row.created_at,
    )


def _write_trip(row: TripRow, trip: Trip) -> None:
    row.destination = trip.destination
    row.start_date = trip.start_date
    row.end_date = trip.end_date
    row.budget = trip.budget
    row.spent = trip.spent
    row.status = trip.status.value
    row.lat = trip.coordinates.lat if trip.coordinates else None
    row.lng = trip.coordinates.lng if trip.coordinates else None
    row.image_url = trip.image_url


def _activity_from_row(row: ActivityRow) -> Activity:
    return Activity(
        id=row.id,
        trip_id=row.trip_id,
        day=row.day,
        order_index=row.order_index,
        title=row.title,
        description=row.description,
        category=row.category,
        time=row.time,
        duration=row.duration,
        location=row.location,
        cost=row.cost,
        completed=row.completed,
        energy_level_requirement=row.energy_level_requirement,
        is_shadow_option=row.is_shadow_option,
        parent_activity_id=row.parent_activity_id,
        coordinates=_coords(row.lat, row.lng),
        image_url=row.image_url,
        image_keyword=row.image_keyword,
        created_at=row.created_at,
    )


def _write_activity(row: ActivityRow, activity: Activity) -> None:
    row.title = activity.title
    row.description = activity.description
    row.category = activity.category.value
    row.time = activity.time
    row.duration = activity.duration
    row.location = activity.location
    row.cost = activity.cost
    row.completed = activity.completed
    row.energy_level_requirement = activity.energy_level_requirement.value
    row.is_shadow_option = activity.is_shadow_option
    row.image_url = activity.image_url


def _budget_item_from_row(row: BudgetItemRow) -> BudgetItem:
    return BudgetItem(
        id=row.id,
        trip_id=row.trip_id,
        category=row.category,
        amount=row.amount,
        description=row.description,
        date=row.date,
        source_activity_id=row.source_activity_id,
        created_at=row.created_at,
    )


def _discovery_from_row(row: DiscoveryRow) -> Discovery:
    return Discovery(
        id=row.id,
        title=row.title,
        description=row.description,
        category=row.category,
        location=row.location,
        image_url=row.image_url,
        rating=row.rating,
        sentiment=row.sentiment,
        cost=row.cost,
        tags=list(row.tags),
        created_at=row.created_at,
    )


class SqlItineraryStore:
    """SQL implementation of ItineraryStore.

    Owns one session for its lifetime. Every mutation runs inside
    `transaction()`, which commits only when the outermost block exits and
    rolls the session back if it raises.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._lock = threading.RLock()
        self._depth = 0

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

            self._depth = 1
            try:
                yield
                self._session.commit()
            except BaseException:
                self._session.rollback()
                logger.warning("Transaction rolled back")
                raise
            finally:
                self._depth = 0

    def _by_id(self, model: type[R], record_id: str) -> Query:
        return self._session.query(model).filter(model.id == record_id)

    def _require(self, model: type[R], record_id: str, entity: str) -> R:
        row = self._by_id(model, record_id).first()
        if row is None:
            raise NotFoundError(f"{entity} {record_id} not found")
        return row

    # Trips

    def create_trip(self, trip: Trip) -> Trip:
        """Insert a new trip."""
        with self.transaction():
            row = TripRow(id=trip.id, user_id=trip.user_id, created_at=trip.created_at)
            _write_trip(row, trip)
            self._session.add(row)
            self._session.flush()
            return _trip_from_row(row)

    def get_trip(self, trip_id: str) -> Trip | None:
        """Get trip by ID."""
        with self._lock:
            row = self._by_id(TripRow, trip_id).first()
            return _trip_from_row(row) if row else None

    def list_trips(self, user_id: str) -> list[Trip]:
        """List a caller's trips, newest first."""
        with self._lock:
            rows = (
                self._session.query(TripRow)
                .filter(TripRow.user_id == user_id)
                .order_by(TripRow.created_at.desc(), TripRow.seq.desc())
                .all()
            )
            return [_trip_from_row(row) for row in rows]

    def update_trip(self, trip_id: str, updates: dict[str, Any]) -> Trip:
        """Apply allow-listed trip fields."""
        with self.transaction():
            row = self._require(TripRow, trip_id, "Trip")
            sanitized = sanitize_updates(updates, TRIP_UPDATABLE_FIELDS, "trip")
            updated = Trip.model_validate({**_trip_from_row(row).model_dump(), **sanitized})
            _write_trip(row, updated)
            self._session.flush()
            return _trip_from_row(row)

    def set_trip_spent(self, trip_id: str, spent: float) -> Trip:
        """Write the derived spent amount."""
        with self.transaction():
            row = self._require(TripRow, trip_id, "Trip")
            row.spent = spent
            self._session.flush()
            return _trip_from_row(row)

    def delete_trip(self, trip_id: str) -> None:
        """Delete a trip and cascade to everything it owns."""
        with self.transaction():
            row = self._require(TripRow, trip_id, "Trip")
            for model in (ActivityRow, BudgetItemRow, MoodReadingRow, PivotLogRow):
                self._session.query(model).filter(model.trip_id == trip_id).delete(
                    synchronize_session=False
                )
            self._session.delete(row)

    # Activities

    def create_activity(self, activity: Activity) -> Activity:
        """Insert a new activity."""
        with self.transaction():
            row = ActivityRow(
                id=activity.id,
                trip_id=activity.trip_id,
                day=activity.day,
                order_index=activity.order_index,
                parent_activity_id=activity.parent_activity_id,
                image_keyword=activity.image_keyword,
                created_at=activity.created_at,
            )
            _write_activity(row, activity)
            row.lat = activity.coordinates.lat if activity.coordinates else None
            row.lng = activity.coordinates.lng if activity.coordinates else None
            self._session.add(row)
            self._session.flush()
            return _activity_from_row(row)

    def create_itinerary(self, trip: Trip, activities: list[Activity]) -> Trip:
        """Insert a trip and its activities as one batch."""
        with self.transaction():
            created = self.create_trip(trip)
            for activity in activities:
                self.create_activity(activity)
            return created

    def get_activity(self, activity_id: str) -> Activity | None:
        """Get activity by ID."""
        with self._lock:
            row = self._by_id(ActivityRow, activity_id).first()
            return _activity_from_row(row) if row else None

    def list_activities(self, trip_id: str) -> list[Activity]:
        """Main itinerary ordered by (day, order_index)."""
        return self._ordered_activities(trip_id, shadow=False)

    def list_shadow_activities(self, trip_id: str) -> list[Activity]:
        """Shadow options ordered by (day, order_index)."""
        return self._ordered_activities(trip_id, shadow=True)

    def _ordered_activities(self, trip_id: str, *, shadow: bool) -> list[Activity]:
        with self._lock:
            rows = (
                self._session.query(ActivityRow)
                .filter(
                    ActivityRow.trip_id == trip_id,
                    ActivityRow.is_shadow_option == shadow,
                )
                .order_by(ActivityRow.day, ActivityRow.order_index, ActivityRow.seq)
                .all()
            )
            return [_activity_from_row(row) for row in rows]

    def update_activity(self, activity_id: str, updates: dict[str, Any]) -> Activity:
        """Apply allow-listed activity fields."""
        with self.transaction():
            row = self._require(ActivityRow, activity_id, "Activity")
            sanitized = sanitize_updates(updates, ACTIVITY_UPDATABLE_FIELDS, "activity")
            current = _activity_from_row(row)
            updated = Activity.model_validate({**current.model_dump(), **sanitized})
            _write_activity(row, updated)
            self._session.flush()
            return _activity_from_row(row)

    def delete_activity(self, activity_id: str) -> None:
        """Delete a single activity."""
        with self.transaction():
            row = self._require(ActivityRow, activity_id, "Activity")
            self._session.delete(row)

    # Budget items

    def create_budget_item(self, item: BudgetItem) -> BudgetItem:
        """Insert a budget item."""
        with self.transaction():
            row = BudgetItemRow(
                id=item.id,
                trip_id=item.trip_id,
                category=item.category,
                amount=item.amount,
                description=item.description,
                date=item.date,
                source_activity_id=item.source_activity_id,
                created_at=item.created_at,
            )
            self._session.add(row)
            self._session.flush()
            return _budget_item_from_row(row)

    def get_budget_item(self, item_id: str) -> BudgetItem | None:
        """Get budget item by ID."""
        with self._lock:
            row = self._by_id(BudgetItemRow, item_id).first()
            return _budget_item_from_row(row) if row else None

    def list_budget_items(self, trip_id: str) -> list[BudgetItem]:
        """Budget items for a trip, newest date first."""
        with self._lock:
            rows = (
                self._session.query(BudgetItemRow)
                .filter(BudgetItemRow.trip_id == trip_id)
                .order_by(
                    BudgetItemRow.date.desc(),
                    BudgetItemRow.created_at.desc(),
                    BudgetItemRow.seq.desc(),
                )
                .all()
            )
            return [_budget_item_from_row(row) for row in rows]

    def delete_budget_item(self, item_id: str) -> None:
        """Delete a budget item."""
        with self.transaction():
            row = self._require(BudgetItemRow, item_id, "Budget item")
            self._session.delete(row)

    # Mood readings and pivot logs

    def create_mood_reading(self, reading: MoodReading) -> MoodReading:
        """Append a mood reading."""
        with self.transaction():
            self._session.add(
                MoodReadingRow(
                    id=reading.id,
                    trip_id=reading.trip_id,
                    user_id=reading.user_id,
                    energy_level=reading.energy_level.value,
                    timestamp=reading.timestamp,
                )
            )
            self._session.flush()
            return reading.model_copy(deep=True)

    def list_mood_readings(self, trip_id: str) -> list[MoodReading]:
        """Mood readings for a trip, newest first."""
        with self._lock:
            rows = (
                self._session.query(MoodReadingRow)
                .filter(MoodReadingRow.trip_id == trip_id)
                .order_by(MoodReadingRow.timestamp.desc(), MoodReadingRow.seq.desc())
                .all()
            )
            return [
                MoodReading(
                    id=row.id,
                    trip_id=row.trip_id,
                    user_id=row.user_id,
                    energy_level=row.energy_level,
                    timestamp=row.timestamp,
                )
                for row in rows
            ]

    def create_pivot_log(self, log: PivotLog) -> PivotLog:
        """Append a pivot log entry."""
        with self.transaction():
            self._session.add(
                PivotLogRow(
                    id=log.id,
                    trip_id=log.trip_id,
                    previous_activity_id=log.previous_activity_id,
                    new_activity_id=log.new_activity_id,
                    reason=log.reason,
                    trigger=log.trigger.value,
                    created_at=log.created_at,
                )
            )
            self._session.flush()
            return log.model_copy(deep=True)

    def list_pivot_logs(self, trip_id: str) -> list[PivotLog]:
        """Pivot logs for a trip, newest first."""
        with self._lock:
            rows = (
                self._session.query(PivotLogRow)
                .filter(PivotLogRow.trip_id == trip_id)
                .order_by(PivotLogRow.created_at.desc(), PivotLogRow.seq.desc())
                .all()
            )
            return [
                PivotLog(
                    id=row.id,
                    trip_id=row.trip_id,
                    previous_activity_id=row.previous_activity_id,
                    new_activity_id=row.new_activity_id,
                    reason=row.reason,
                    trigger=row.trigger,
                    created_at=row.created_at,
                )
                for row in rows
            ]

    # Preferences and chat

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Get a caller's stored preferences."""
        with self._lock:
            row = self._session.get(PreferencesRow, user_id)
            if row is None:
                return None
            return UserPreferences(
                id=row.id,
                user_id=row.user_id,
                budget=row.budget,
                pace=row.pace,
                interests=list(row.interests),
                dietary=list(row.dietary),
                travel_style=row.travel_style,
                updated_at=row.updated_at,
            )

    def save_preferences(self, prefs: UserPreferences) -> UserPreferences:
        """Insert or replace a caller's preferences."""
        with self.transaction():
            stored = prefs.model_copy(update={"updated_at": datetime.now()}, deep=True)
            row = self._session.get(PreferencesRow, prefs.user_id)
            if row is None:
                row = PreferencesRow(user_id=prefs.user_id, id=prefs.id)
                self._session.add(row)
            row.budget = stored.budget
            row.pace = stored.pace
            row.interests = list(stored.interests)
            row.dietary = list(stored.dietary)
            row.travel_style = stored.travel_style
            row.updated_at = stored.updated_at
            self._session.flush()
            return stored.model_copy(update={"id": row.id})

    def create_chat_message(self, message: ChatMessage) -> ChatMessage:
        """Append a chat message."""
        with self.transaction():
            self._session.add(
                ChatMessageRow(
                    id=message.id,
                    user_id=message.user_id,
                    role=message.role.value,
                    content=message.content,
                    trip_id=message.trip_id,
                    created_at=message.created_at,
                )
            )
            self._session.flush()
            return message.model_copy(deep=True)

    def list_chat_messages(self, user_id: str) -> list[ChatMessage]:
        """Chat history for a caller, oldest first."""
        with self._lock:
            rows = (
                self._session.query(ChatMessageRow)
                .filter(ChatMessageRow.user_id == user_id)
                .order_by(ChatMessageRow.created_at, ChatMessageRow.seq)
                .all()
            )
            return [
                ChatMessage(
                    id=row.id,
                    user_id=row.user_id,
                    role=row.role,
                    content=row.content,
                    trip_id=row.trip_id,
                    created_at=row.created_at,
                )
                for row in rows
            ]

    # Discovery catalog

    def create_discovery(self, discovery: Discovery) -> Discovery:
        """Add a place to the catalog."""
        with self.transaction():
            self._session.add(
                DiscoveryRow(
                    id=discovery.id,
                    title=discovery.title,
                    description=discovery.description,
                    category=discovery.category,
                    location=discovery.location,
                    image_url=discovery.image_url,
                    rating=discovery.rating,
                    sentiment=discovery.sentiment,
                    cost=discovery.cost,
                    tags=list(discovery.tags),
                    created_at=discovery.created_at,
                )
            )
            self._session.flush()
            return discovery.model_copy(deep=True)

    def list_discoveries(self) -> list[Discovery]:
        """Whole catalog, newest first."""
        with self._lock:
            rows = self._discovery_query().all()
            return [_discovery_from_row(row) for row in rows]

    def list_featured_discoveries(self, min_rating: float, limit: int) -> list[Discovery]:
        """Places rated at least min_rating, newest first, at most limit."""
        with self._lock:
            rows = self._discovery_query().filter(DiscoveryRow.rating >= min_rating).limit(limit).all()
            return [_discovery_from_row(row) for row in rows]

    def _discovery_query(self) -> Query:
        return self._session.query(DiscoveryRow).order_by(DiscoveryRow.created_at.desc(), DiscoveryRow.seq.desc())

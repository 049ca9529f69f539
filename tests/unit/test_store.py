"""Tests for the itinerary store implementations (in-memory and SQL)."""

from collections.abc import Callable
from datetime import date, datetime, timedelta

import pytest

from vivot.app.db.context import RequestContext
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import NotFoundError
from vivot.app.models.activity import Activity
from vivot.app.models.budget import BudgetItem
from vivot.app.models.chat import ChatMessage
from vivot.app.models.common import ChatRole, Coordinates, EnergyLevel
from vivot.app.models.mood import MoodReading
from vivot.app.models.pivot import PivotLog
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import Trip


def test_trip_roundtrip_keeps_coordinates(
    store: ItineraryStore, ctx: RequestContext, make_trip: Callable[..., Trip]
) -> None:
    """Test that a stored trip reads back field for field."""
    trip = make_trip(store, ctx, coordinates=Coordinates(lat=38.72, lng=-9.14))

    loaded = store.get_trip(trip.id)

    assert loaded is not None
    assert loaded.destination == "Lisbon, Portugal"
    assert loaded.coordinates == Coordinates(lat=38.72, lng=-9.14)
    assert loaded.spent == 0.0
    assert loaded.user_id == ctx.user_id


def test_get_missing_trip_returns_none(store: ItineraryStore) -> None:
    assert store.get_trip("missing") is None


def test_list_trips_newest_first_and_scoped_to_user(
    store: ItineraryStore,
    ctx: RequestContext,
    other_ctx: RequestContext,
    make_trip: Callable[..., Trip],
) -> None:
    """Test that list_trips only returns the caller's trips, newest first."""
    now = datetime.now()
    older = make_trip(store, ctx, destination="Porto", created_at=now - timedelta(days=1))
    newer = make_trip(store, ctx, destination="Faro", created_at=now)
    make_trip(store, other_ctx, destination="Madrid")

    trips = store.list_trips(ctx.user_id)

    assert [t.id for t in trips] == [newer.id, older.id]


def test_update_trip_ignores_fields_outside_allow_list(
    store: ItineraryStore, ctx: RequestContext, make_trip: Callable[..., Trip]
) -> None:
    """Test that spent, user_id and id cannot be written through update_trip."""
    trip = make_trip(store, ctx)

    updated = store.update_trip(
        trip.id,
        {"destination": "Sintra", "spent": 999.0, "user_id": "mallory", "id": "other"},
    )

    assert updated.destination == "Sintra"
    assert updated.spent == 0.0
    assert updated.user_id == ctx.user_id
    assert updated.id == trip.id


def test_update_missing_trip_raises_not_found(store: ItineraryStore) -> None:
    with pytest.raises(NotFoundError):
        store.update_trip("missing", {"destination": "Nowhere"})


def test_activities_ordered_by_day_then_order_index(
    store: ItineraryStore,
    ctx: RequestContext,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
    make_shadow: Callable[..., Activity],
) -> None:
    """Test main itinerary ordering and shadow exclusion."""
    trip = make_trip(store, ctx)
    d2 = make_activity(store, trip, day=2, order_index=0, title="Day 2 morning")
    d1b = make_activity(store, trip, day=1, order_index=1, title="Day 1 lunch")
    d1a = make_activity(store, trip, day=1, order_index=0, title="Day 1 morning")
    shadow = make_shadow(store, d1a)

    main = store.list_activities(trip.id)
    shadows = store.list_shadow_activities(trip.id)

    assert [a.id for a in main] == [d1a.id, d1b.id, d2.id]
    assert [a.id for a in shadows] == [shadow.id]
    assert shadows[0].parent_activity_id == d1a.id


def test_update_activity_ignores_identity_fields(
    store: ItineraryStore,
    ctx: RequestContext,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)

    updated = store.update_activity(
        activity.id,
        {"title": "Tram 28 ride", "trip_id": "other-trip", "parent_activity_id": "x"},
    )

    assert updated.title == "Tram 28 ride"
    assert updated.trip_id == trip.id
    assert updated.parent_activity_id is None


def test_delete_missing_activity_raises_not_found(store: ItineraryStore) -> None:
    with pytest.raises(NotFoundError):
        store.delete_activity("missing")


def test_budget_items_newest_date_first(
    store: ItineraryStore, ctx: RequestContext, make_trip: Callable[..., Trip]
) -> None:
    trip = make_trip(store, ctx)
    early = store.create_budget_item(
        BudgetItem(
            trip_id=trip.id, category="food", amount=10, description="Bica", date=date(2026, 6, 1)
        )
    )
    late = store.create_budget_item(
        BudgetItem(
            trip_id=trip.id, category="food", amount=20, description="Dinner", date=date(2026, 6, 2)
        )
    )

    items = store.list_budget_items(trip.id)

    assert [i.id for i in items] == [late.id, early.id]


def test_mood_readings_and_pivot_logs_newest_first(
    store: ItineraryStore, ctx: RequestContext, make_trip: Callable[..., Trip]
) -> None:
    trip = make_trip(store, ctx)
    now = datetime.now()
    first = store.create_mood_reading(
        MoodReading(
            trip_id=trip.id,
            user_id=ctx.user_id,
            energy_level=EnergyLevel.high,
            timestamp=now - timedelta(minutes=5),
        )
    )
    second = store.create_mood_reading(
        MoodReading(trip_id=trip.id, user_id=ctx.user_id, energy_level=EnergyLevel.low, timestamp=now)
    )
    old_log = store.create_pivot_log(
        PivotLog(
            trip_id=trip.id,
            previous_activity_id="a1",
            reason="tired",
            created_at=now - timedelta(minutes=1),
        )
    )
    new_log = store.create_pivot_log(
        PivotLog(trip_id=trip.id, previous_activity_id="a2", reason="rain", created_at=now)
    )

    assert [r.id for r in store.list_mood_readings(trip.id)] == [second.id, first.id]
    assert [entry.id for entry in store.list_pivot_logs(trip.id)] == [new_log.id, old_log.id]


def test_delete_trip_cascades(
    store: ItineraryStore,
    ctx: RequestContext,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    """Test that deleting a trip removes everything it owns."""
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)
    item = store.create_budget_item(
        BudgetItem(trip_id=trip.id, category="food", amount=5, description="Tart", date=date.today())
    )
    store.create_mood_reading(
        MoodReading(trip_id=trip.id, user_id=ctx.user_id, energy_level=EnergyLevel.low)
    )
    store.create_pivot_log(PivotLog(trip_id=trip.id, previous_activity_id=activity.id, reason="x"))

    store.delete_trip(trip.id)

    assert store.get_trip(trip.id) is None
    assert store.get_activity(activity.id) is None
    assert store.get_budget_item(item.id) is None
    assert store.list_mood_readings(trip.id) == []
    assert store.list_pivot_logs(trip.id) == []


def test_transaction_rolls_back_on_error(
    store: ItineraryStore, ctx: RequestContext, make_trip: Callable[..., Trip]
) -> None:
    """Test that a failing block leaves no partial writes behind."""
    trip = make_trip(store, ctx)

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.update_trip(trip.id, {"destination": "Changed"})
            store.create_budget_item(
                BudgetItem(
                    trip_id=trip.id, category="food", amount=5, description="x", date=date.today()
                )
            )
            raise RuntimeError("boom")

    reloaded = store.get_trip(trip.id)
    assert reloaded is not None
    assert reloaded.destination == "Lisbon, Portugal"
    assert store.list_budget_items(trip.id) == []


def test_nested_transaction_joins_outer(
    store: ItineraryStore, ctx: RequestContext, make_trip: Callable[..., Trip]
) -> None:
    """Test that an error in the outer block also undoes the inner block's writes."""
    trip = make_trip(store, ctx)

    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                store.set_trip_spent(trip.id, 42.0)
            raise RuntimeError("boom")

    reloaded = store.get_trip(trip.id)
    assert reloaded is not None
    assert reloaded.spent == 0.0


def test_create_itinerary_is_atomic(
    store: ItineraryStore, ctx: RequestContext, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that a batch failing part-way persists nothing."""
    trip = Trip(
        user_id=ctx.user_id,
        destination="Kyoto",
        start_date=date(2026, 4, 1),
        end_date=date(2026, 4, 2),
        budget=800,
    )
    first = Activity(trip_id=trip.id, day=1, title="Fushimi Inari")
    second = Activity(trip_id=trip.id, day=2, title="Arashiyama")

    original = store.create_activity

    def fail_on_second(activity: Activity) -> Activity:
        if activity.id == second.id:
            raise RuntimeError("write failed")
        return original(activity)

    monkeypatch.setattr(store, "create_activity", fail_on_second)

    with pytest.raises(RuntimeError):
        store.create_itinerary(trip, [first, second])

    assert store.get_trip(trip.id) is None
    assert store.get_activity(first.id) is None


def test_create_itinerary_persists_trip_and_activities(
    store: ItineraryStore, ctx: RequestContext
) -> None:
    trip = Trip(
        user_id=ctx.user_id,
        destination="Kyoto",
        start_date=date(2026, 4, 1),
        end_date=date(2026, 4, 2),
        budget=800,
    )
    main = Activity(trip_id=trip.id, day=1, title="Fushimi Inari")
    shadow = Activity(
        trip_id=trip.id,
        day=1,
        title="Tea house",
        is_shadow_option=True,
        parent_activity_id=main.id,
        energy_level_requirement=EnergyLevel.low,
    )

    store.create_itinerary(trip, [main, shadow])

    assert store.get_trip(trip.id) is not None
    assert [a.id for a in store.list_activities(trip.id)] == [main.id]
    assert [a.id for a in store.list_shadow_activities(trip.id)] == [shadow.id]


def test_preferences_upsert(store: ItineraryStore, ctx: RequestContext) -> None:
    assert store.get_preferences(ctx.user_id) is None

    store.save_preferences(UserPreferences(user_id=ctx.user_id, pace="relaxed"))
    store.save_preferences(
        UserPreferences(user_id=ctx.user_id, pace="fast-paced", interests=["hiking"])
    )

    prefs = store.get_preferences(ctx.user_id)
    assert prefs is not None
    assert prefs.pace == "fast-paced"
    assert prefs.interests == ["hiking"]


def test_chat_messages_oldest_first(
    store: ItineraryStore, ctx: RequestContext, other_ctx: RequestContext
) -> None:
    now = datetime.now()
    first = store.create_chat_message(
        ChatMessage(
            user_id=ctx.user_id,
            role=ChatRole.user,
            content="Plan Rome",
            created_at=now - timedelta(seconds=2),
        )
    )
    second = store.create_chat_message(
        ChatMessage(user_id=ctx.user_id, role=ChatRole.assistant, content="Done", created_at=now)
    )
    store.create_chat_message(ChatMessage(user_id=other_ctx.user_id, role=ChatRole.user, content="hi"))

    assert [m.id for m in store.list_chat_messages(ctx.user_id)] == [first.id, second.id]


def test_in_memory_store_returns_copies(
    memory_store: ItineraryStore, ctx: RequestContext, make_trip: Callable[..., Trip]
) -> None:
    """Test that mutating a returned model does not change stored state."""
    trip = make_trip(memory_store, ctx)

    loaded = memory_store.get_trip(trip.id)
    assert loaded is not None
    loaded.destination = "Mutated"

    reloaded = memory_store.get_trip(trip.id)
    assert reloaded is not None
    assert reloaded.destination == "Lisbon, Portugal"

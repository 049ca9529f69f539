"""Tests for the Mood Pivot engine."""

from collections.abc import Callable

import pytest

from vivot.app.db.context import RequestContext
from vivot.app.db.repositories import ItineraryStore
from vivot.app.errors import GenerationFailedError, InputValidationError, NotFoundError
from vivot.app.ledger.budget import BudgetLedger
from vivot.app.models.activity import Activity
from vivot.app.models.common import ActivityCategory, EnergyLevel
from vivot.app.models.pivot import NewActivityData, PivotContext, PivotState
from vivot.app.models.trip import Trip
from vivot.app.mood.aggregator import MoodAggregator
from vivot.app.pivot.engine import DEFAULT_PIVOT_REASON, PivotEngine
from tests.fakes import FakeGenerator


@pytest.mark.asyncio
async def test_propose_prefers_shadow_and_skips_generator(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
    make_shadow: Callable[..., Activity],
) -> None:
    """Test that a pre-planned shadow wins without a generator call."""
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip, title="Castle tour")
    shadow = make_shadow(store, activity, title="Garden café")
    engine = PivotEngine(store, generator)

    proposal = await engine.propose_pivot(ctx, trip.id, activity.id)

    assert proposal.is_pre_planned is True
    assert proposal.state == PivotState.proposed
    assert proposal.new_activity.id == shadow.id
    assert proposal.new_activity.title == "Garden café"
    assert "Castle tour" in proposal.proposal
    assert "Garden café" in proposal.proposal
    assert generator.calls == []


@pytest.mark.asyncio
async def test_propose_calls_generator_once_without_shadow(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx, budget=500.0)
    activity = make_activity(store, trip)
    engine = PivotEngine(store, generator)

    proposal = await engine.propose_pivot(ctx, trip.id, activity.id)

    assert proposal.is_pre_planned is False
    assert proposal.new_activity.title == "Café break"
    assert proposal.new_activity.id is None
    assert generator.call_names() == ["propose_alternative"]


@pytest.mark.asyncio
async def test_propose_fills_missing_context(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    """Test that context defaults come from the activity, the budget and the latest mood."""
    trip = make_trip(store, ctx, budget=500.0)
    activity = make_activity(store, trip, location="Alfama", time="15:00")
    store.set_trip_spent(trip.id, 120.0)
    MoodAggregator(store).record_mood(ctx, trip.id, EnergyLevel.low)
    engine = PivotEngine(store, generator)

    await engine.propose_pivot(ctx, trip.id, activity.id, PivotContext(time="16:30"))

    _, kwargs = generator.calls[0]
    context: PivotContext = kwargs["context"]
    assert context.location == "Alfama"
    assert context.time == "16:30"
    assert context.budget_remaining == 380.0
    assert context.group_mood == "low"


@pytest.mark.asyncio
async def test_propose_discards_generated_activity_id(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)
    generator.pivot_reply.new_activity.id = activity.id
    engine = PivotEngine(store, generator)

    proposal = await engine.propose_pivot(ctx, trip.id, activity.id)

    assert proposal.new_activity.id is None


@pytest.mark.asyncio
async def test_propose_surfaces_generation_failure(
    store: ItineraryStore,
    ctx: RequestContext,
    failing_generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)
    engine = PivotEngine(store, failing_generator)

    with pytest.raises(GenerationFailedError):
        await engine.propose_pivot(ctx, trip.id, activity.id)

    assert store.list_pivot_logs(trip.id) == []


@pytest.mark.asyncio
async def test_propose_rejects_activity_from_another_trip(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    other_trip = make_trip(store, ctx, destination="Porto")
    foreign = make_activity(store, other_trip)
    engine = PivotEngine(store, generator)

    with pytest.raises(NotFoundError):
        await engine.propose_pivot(ctx, trip.id, foreign.id)
    with pytest.raises(NotFoundError):
        await engine.propose_pivot(ctx, trip.id, "missing")


@pytest.mark.asyncio
async def test_propose_on_other_callers_trip_is_not_found(
    store: ItineraryStore,
    ctx: RequestContext,
    other_ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)

    with pytest.raises(NotFoundError):
        await PivotEngine(store, generator).propose_pivot(other_ctx, trip.id, activity.id)


@pytest.mark.asyncio
async def test_confirm_shadow_pivot_updates_in_place_and_logs(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
    make_shadow: Callable[..., Activity],
) -> None:
    """Test the full propose -> confirm path with a shadow option."""
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip, day=2, order_index=1)
    shadow = make_shadow(store, activity)
    engine = PivotEngine(store, generator)

    proposal = await engine.propose_pivot(ctx, trip.id, activity.id)
    commit = engine.confirm_pivot(ctx, trip.id, activity.id, proposal.new_activity)

    assert commit.state == PivotState.committed
    assert commit.activity.id == activity.id
    assert commit.activity.title == shadow.title
    assert commit.activity.cost == shadow.cost
    assert commit.activity.energy_level_requirement == EnergyLevel.low
    assert commit.activity.is_shadow_option is False
    assert commit.activity.day == 2
    assert commit.activity.order_index == 1
    assert commit.log.previous_activity_id == activity.id
    assert commit.log.new_activity_id == shadow.id
    assert commit.log.reason == DEFAULT_PIVOT_REASON

    # The shadow itself is untouched and the main itinerary keeps one entry
    assert store.get_activity(shadow.id).is_shadow_option is True  # type: ignore[union-attr]
    assert [a.id for a in store.list_activities(trip.id)] == [activity.id]
    assert [entry.id for entry in engine.list_pivot_logs(ctx, trip.id)] == [commit.log.id]


@pytest.mark.asyncio
async def test_confirm_generated_pivot_logs_without_new_activity_id(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)
    engine = PivotEngine(store, generator)

    proposal = await engine.propose_pivot(ctx, trip.id, activity.id)
    commit = engine.confirm_pivot(
        ctx, trip.id, activity.id, proposal.new_activity, reason="Everyone is tired"
    )

    assert commit.activity.title == "Café break"
    assert commit.activity.category == ActivityCategory.restaurant
    assert commit.log.new_activity_id is None
    assert commit.log.reason == "Everyone is tired"


def test_confirm_ignores_ids_that_are_not_this_activitys_shadow(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
    make_shadow: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)
    sibling = make_activity(store, trip, order_index=1, title="Sibling")
    sibling_shadow = make_shadow(store, sibling)

    commit = PivotEngine(store, generator).confirm_pivot(
        ctx, trip.id, activity.id, NewActivityData.from_activity(sibling_shadow)
    )

    assert commit.log.new_activity_id is None


def test_confirm_pivot_on_completed_activity_reprices_ledger(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    """Test that pivoting a completed activity keeps spent consistent."""
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip, cost=40)
    engine = PivotEngine(store, generator)

    BudgetLedger(store).set_completion(ctx, activity.id, True)

    engine.confirm_pivot(
        ctx, trip.id, activity.id, NewActivityData(title="Bench with a view", cost=0)
    )

    assert store.list_budget_items(trip.id) == []
    assert store.get_trip(trip.id).spent == 0.0  # type: ignore[union-attr]


def test_confirm_is_atomic(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that a failed log append leaves the activity unchanged."""
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)

    def broken_create_pivot_log(log: object) -> object:
        raise RuntimeError("write failed")

    monkeypatch.setattr(store, "create_pivot_log", broken_create_pivot_log)

    with pytest.raises(RuntimeError):
        PivotEngine(store, generator).confirm_pivot(
            ctx, trip.id, activity.id, NewActivityData(title="Nap")
        )

    assert store.get_activity(activity.id).title == activity.title  # type: ignore[union-attr]


def test_confirm_missing_activity_is_not_found(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
) -> None:
    trip = make_trip(store, ctx)

    with pytest.raises(NotFoundError):
        PivotEngine(store, generator).confirm_pivot(
            ctx, trip.id, "missing", NewActivityData(title="Nap")
        )


def test_confirming_same_data_twice_is_idempotent_but_logs_twice(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
) -> None:
    """Test that a repeated confirm leaves the same fields and appends a second log."""
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip, completed=True, cost=40)
    ledger = BudgetLedger(store)
    ledger.recompute_spent(trip.id)
    engine = PivotEngine(store, generator, ledger)
    data = NewActivityData(
        title="Tram ride", category=ActivityCategory.transport, location="Line 28", cost=3
    )

    first = engine.confirm_pivot(ctx, trip.id, activity.id, data, reason="Rain")
    second = engine.confirm_pivot(ctx, trip.id, activity.id, data, reason="Rain")

    assert second.activity == first.activity
    assert store.get_activity(activity.id) == first.activity
    logs = engine.list_pivot_logs(ctx, trip.id)
    assert len(logs) == 2
    assert {entry.id for entry in logs} == {first.log.id, second.log.id}
    assert all(entry.previous_activity_id == activity.id for entry in logs)


@pytest.mark.asyncio
async def test_shadow_option_is_never_a_pivot_target(
    store: ItineraryStore,
    ctx: RequestContext,
    generator: FakeGenerator,
    make_trip: Callable[..., Trip],
    make_activity: Callable[..., Activity],
    make_shadow: Callable[..., Activity],
) -> None:
    trip = make_trip(store, ctx)
    activity = make_activity(store, trip)
    shadow = make_shadow(store, activity)
    engine = PivotEngine(store, generator)

    with pytest.raises(InputValidationError):
        await engine.propose_pivot(ctx, trip.id, shadow.id)
    with pytest.raises(InputValidationError):
        engine.confirm_pivot(ctx, trip.id, shadow.id, NewActivityData(title="Nap"))

    assert generator.calls == []
    assert store.get_activity(shadow.id) == shadow
    assert [a.id for a in store.list_activities(trip.id)] == [activity.id]
    assert store.list_pivot_logs(trip.id) == []

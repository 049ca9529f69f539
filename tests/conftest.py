"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Generator
from datetime import date
from typing import Any

import pytest
from sqlalchemy.orm import Session

from vivot.app.db.context import RequestContext
from vivot.app.db.engine import create_engine_from_url, create_session_factory
from vivot.app.db.inmemory import InMemoryItineraryStore
from vivot.app.db.models import Base
from vivot.app.db.repositories import ItineraryStore
from vivot.app.db.sql_store import SqlItineraryStore
from vivot.app.errors import GenerationFailedError
from vivot.app.models.activity import Activity
from vivot.app.models.common import EnergyLevel
from vivot.app.models.trip import Trip
from tests.fakes import FakeGenerator, FakeGeocoder


@pytest.fixture
def ctx() -> RequestContext:
    """Caller owning the test trips."""
    return RequestContext(user_id="alice")


@pytest.fixture
def other_ctx() -> RequestContext:
    """A different caller."""
    return RequestContext(user_id="bob")


@pytest.fixture
def memory_store() -> InMemoryItineraryStore:
    return InMemoryItineraryStore()


@pytest.fixture
def sql_store() -> Generator[SqlItineraryStore, None, None]:
    """SQL store on a private in-memory SQLite database."""
    engine = create_engine_from_url("sqlite://")
    Base.metadata.create_all(engine)
    session: Session = create_session_factory(engine)()

    yield SqlItineraryStore(session)

    session.close()
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest) -> ItineraryStore:
    """Every store implementation, so behaviour is checked against both."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def failing_generator() -> FakeGenerator:
    fake = FakeGenerator()
    fake.error = GenerationFailedError("Generator call failed: APITimeoutError")
    return fake


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def make_trip() -> Callable[..., Trip]:
    """Factory inserting a trip for a caller."""

    def _make(store: ItineraryStore, ctx: RequestContext, **overrides: Any) -> Trip:
        fields: dict[str, Any] = {
            "user_id": ctx.user_id,
            "destination": "Lisbon, Portugal",
            "start_date": date(2026, 6, 1),
            "end_date": date(2026, 6, 3),
            "budget": 500.0,
        }
        fields.update(overrides)
        return store.create_trip(Trip(**fields))

    return _make


@pytest.fixture
def make_activity() -> Callable[..., Activity]:
    """Factory inserting an activity into a trip."""

    def _make(store: ItineraryStore, trip: Trip, **overrides: Any) -> Activity:
        fields: dict[str, Any] = {
            "trip_id": trip.id,
            "day": 1,
            "order_index": 0,
            "title": "Castle tour",
            "location": "São Jorge Castle",
            "time": "10:00",
            "cost": 40.0,
            "energy_level_requirement": EnergyLevel.high,
        }
        fields.update(overrides)
        return store.create_activity(Activity(**fields))

    return _make


@pytest.fixture
def make_shadow() -> Callable[..., Activity]:
    """Factory inserting a shadow option for a main activity."""

    def _make(store: ItineraryStore, parent: Activity, **overrides: Any) -> Activity:
        fields: dict[str, Any] = {
            "trip_id": parent.trip_id,
            "day": parent.day,
            "order_index": parent.order_index,
            "title": "Garden café",
            "location": "Castle gardens",
            "cost": 8.0,
            "energy_level_requirement": EnergyLevel.low,
            "is_shadow_option": True,
            "parent_activity_id": parent.id,
        }
        fields.update(overrides)
        return store.create_activity(Activity(**fields))

    return _make

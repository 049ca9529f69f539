"""Fixtures for API-level tests."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from vivot.app.api.deps import get_generator, get_geocoder, get_rate_limiter, get_store
from vivot.app.db.inmemory import InMemoryItineraryStore, InMemoryRateLimiter
from vivot.app.main import app
from tests.fakes import FakeGenerator, FakeGeocoder


@pytest.fixture
def api_store() -> InMemoryItineraryStore:
    return InMemoryItineraryStore()


@pytest.fixture
def api_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def api_limiter() -> InMemoryRateLimiter:
    return InMemoryRateLimiter(max_requests=100, window_seconds=60)


@pytest.fixture
def client(
    api_store: InMemoryItineraryStore,
    api_generator: FakeGenerator,
    api_limiter: InMemoryRateLimiter,
) -> Generator[TestClient, None, None]:
    """Test client with process-wide collaborators swapped for test doubles."""
    app.dependency_overrides[get_store] = lambda: api_store
    app.dependency_overrides[get_generator] = lambda: api_generator
    app.dependency_overrides[get_geocoder] = lambda: FakeGeocoder()
    app.dependency_overrides[get_rate_limiter] = lambda: api_limiter

    yield TestClient(app)

    app.dependency_overrides.clear()

"""API tests for the discovery catalog."""

from fastapi.testclient import TestClient

from vivot.app.db.inmemory import InMemoryItineraryStore
from vivot.app.discovery.catalog import seed_discoveries
from vivot.app.models.discovery import Discovery

ALICE = {"Authorization": "Bearer alice"}
BOB = {"Authorization": "Bearer bob"}


def test_catalog_is_shared_between_callers(
    client: TestClient, api_store: InMemoryItineraryStore
) -> None:
    seed_discoveries(api_store)

    alice_view = client.get("/discoveries", headers=ALICE)
    bob_view = client.get("/discoveries", headers=BOB)

    assert alice_view.status_code == 200
    assert len(alice_view.json()) == 6
    assert alice_view.json() == bob_view.json()
    first = alice_view.json()[0]
    assert set(first) >= {"id", "title", "category", "location", "rating", "sentiment", "cost", "tags"}


def test_featured_excludes_low_rated_places(
    client: TestClient, api_store: InMemoryItineraryStore
) -> None:
    seed_discoveries(api_store)
    api_store.create_discovery(
        Discovery(
            title="Crowded viewpoint",
            description="Long queues at every hour",
            category="popular",
            location="Lisbon, Portugal",
            image_url="https://example.com/view.jpg",
            rating=3.2,
            sentiment="trending",
            cost="free",
        )
    )

    everything = client.get("/discoveries", headers=ALICE).json()
    featured = client.get("/discoveries/featured", headers=ALICE).json()

    assert len(everything) == 7
    assert len(featured) == 6
    assert "Crowded viewpoint" not in {d["title"] for d in featured}


def test_empty_catalog_lists_nothing(client: TestClient) -> None:
    response = client.get("/discoveries/featured", headers=ALICE)

    assert response.status_code == 200
    assert response.json() == []


def test_discoveries_require_identity(client: TestClient) -> None:
    response = client.get("/discoveries")

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"

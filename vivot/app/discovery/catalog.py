"""Starter discovery catalog."""

import logging

from vivot.app.db.repositories import ItineraryStore
from vivot.app.models.discovery import Discovery

logger = logging.getLogger(__name__)

_UNSPLASH = "https://images.unsplash.com/photo-{}?w=800"

SEED_DISCOVERIES: list[dict] = [
    {
        "title": "Hidden Temple in Ubud",
        "description": "A secret temple nestled in the rice terraces, known only to locals",
        "category": "hidden-gem",
        "location": "Ubud, Bali",
        "image_url": _UNSPLASH.format("1537996194471-e657df975ab4"),
        "rating": 4.8,
        "sentiment": "hidden-gem",
        "cost": "low",
        "tags": ["culture", "nature", "photography"],
    },
    {
        "title": "Street Food Night Market",
        "description": "Authentic local cuisine experience with over 50 vendors",
        "category": "local-experience",
        "location": "Bangkok, Thailand",
        "image_url": _UNSPLASH.format("1555529733-0e670560f7e1"),
        "rating": 4.6,
        "sentiment": "local-favorite",
        "cost": "low",
        "tags": ["food", "culture", "nightlife"],
    },
    {
        "title": "Glacier Hiking Adventure",
        "description": "Trek across stunning blue ice formations with expert guides",
        "category": "adventure",
        "location": "Patagonia, Argentina",
        "image_url": _UNSPLASH.format("1518182170546-07661fd94144"),
        "rating": 4.9,
        "sentiment": "highly-rated",
        "cost": "high",
        "tags": ["adventure", "nature", "outdoor"],
    },
    {
        "title": "Historic Medina Walking Tour",
        "description": "Explore centuries-old architecture and vibrant souks",
        "category": "popular",
        "location": "Marrakech, Morocco",
        "image_url": _UNSPLASH.format("1539020140153-e479b8c22e70"),
        "rating": 4.5,
        "sentiment": "trending",
        "cost": "medium",
        "tags": ["culture", "history", "shopping"],
    },
    {
        "title": "Sunrise Hot Air Balloon",
        "description": "Float above ancient temples at dawn for breathtaking views",
        "category": "popular",
        "location": "Bagan, Myanmar",
        "image_url": _UNSPLASH.format("1507608869274-d3177c8bb4c7"),
        "rating": 4.9,
        "sentiment": "highly-rated",
        "cost": "high",
        "tags": ["adventure", "photography", "nature"],
    },
    {
        "title": "Traditional Pottery Workshop",
        "description": "Learn ancient ceramic techniques from master artisans",
        "category": "local-experience",
        "location": "Kyoto, Japan",
        "image_url": _UNSPLASH.format("1493106641515-6b5631de4bb9"),
        "rating": 4.7,
        "sentiment": "local-favorite",
        "cost": "medium",
        "tags": ["culture", "art", "hands-on"],
    },
]


def seed_discoveries(store: ItineraryStore) -> int:
    """Load the starter catalog into an empty store.

    Returns the number of places added; a store that already has any
    discoveries is left untouched.
    """
    with store.transaction():
        if store.list_discoveries():
            return 0
        for entry in SEED_DISCOVERIES:
            store.create_discovery(Discovery(**entry))

    logger.info(f"Seeded {len(SEED_DISCOVERIES)} discoveries")
    return len(SEED_DISCOVERIES)

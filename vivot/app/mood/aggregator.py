"""Mood aggregation: record energy readings and decide whether to pivot."""

import logging
from typing import Literal, Protocol

from vivot.app.config import Settings
from vivot.app.db.context import RequestContext
from vivot.app.db.queries import get_owned_trip
from vivot.app.db.repositories import ItineraryStore
from vivot.app.models.common import EnergyLevel
from vivot.app.models.mood import MoodReading, MoodResult
from vivot.app.utils.metrics import mood_readings_total

logger = logging.getLogger(__name__)


class PivotPolicy(Protocol):
    """Decides whether to pivot after a reading.

    `history` holds the trip's readings newest first, including `reading`.
    """

    def should_pivot(self, reading: MoodReading, history: list[MoodReading]) -> bool:
        ...


class SingleLowPolicy:
    """Pivot exactly when the submitted reading is low."""

    def should_pivot(self, reading: MoodReading, history: list[MoodReading]) -> bool:
        return reading.energy_level == EnergyLevel.low


class LowFractionPolicy:
    """Pivot when the share of low readings in a recent window exceeds a threshold."""

    def __init__(self, window_size: int = 10, threshold: float = 0.4) -> None:
        if window_size < 1:
            raise ValueError("window_size must be >= 1")
        self._window_size = window_size
        self._threshold = threshold

    def should_pivot(self, reading: MoodReading, history: list[MoodReading]) -> bool:
        window = history[: self._window_size]
        if not window:
            return False
        low = sum(1 for r in window if r.energy_level == EnergyLevel.low)
        return low / len(window) > self._threshold


def build_policy(
    name: Literal["single_low", "low_fraction"], window_size: int = 10, threshold: float = 0.4
) -> PivotPolicy:
    """Construct a pivot policy by name."""
    if name == "low_fraction":
        return LowFractionPolicy(window_size=window_size, threshold=threshold)
    return SingleLowPolicy()


def policy_from_settings(settings: Settings) -> PivotPolicy:
    """Construct the configured pivot policy."""
    return build_policy(
        settings.mood_pivot_policy,
        window_size=settings.mood_window_size,
        threshold=settings.mood_low_fraction_threshold,
    )


def latest_energy(store: ItineraryStore, trip_id: str) -> EnergyLevel | None:
    """Energy level of the trip's newest reading, if any."""
    readings = store.list_mood_readings(trip_id)
    return readings[0].energy_level if readings else None


class MoodAggregator:
    """Records readings and evaluates one pivot policy over them."""

    def __init__(self, store: ItineraryStore, policy: PivotPolicy | None = None) -> None:
        self._store = store
        self._policy = policy or SingleLowPolicy()

    def record_mood(
        self, ctx: RequestContext, trip_id: str, energy_level: EnergyLevel
    ) -> MoodResult:
        """Append a reading for the caller and evaluate the pivot policy.

        Args:
            ctx: Request context; the reading is attributed to ctx.user_id
            trip_id: Trip ID
            energy_level: Submitted energy level

        Returns:
            The stored reading and the pivot decision

        Raises:
            NotFoundError: If the trip is absent or owned by another caller
        """
        with self._store.transaction():
            get_owned_trip(self._store, ctx, trip_id)
            reading = self._store.create_mood_reading(
                MoodReading(trip_id=trip_id, user_id=ctx.user_id, energy_level=energy_level)
            )
            history = self._store.list_mood_readings(trip_id)

        should_pivot = self._policy.should_pivot(reading, history)
        mood_readings_total.labels(
            energy_level=energy_level.value, should_pivot=str(should_pivot).lower()
        ).inc()

        if should_pivot:
            logger.info(f"Low group energy on trip {trip_id}; pivot suggested")

        return MoodResult(reading=reading, should_pivot=should_pivot)

    def list_readings(self, ctx: RequestContext, trip_id: str) -> list[MoodReading]:
        """Readings for a trip, newest first."""
        get_owned_trip(self._store, ctx, trip_id)
        return self._store.list_mood_readings(trip_id)

"""Mood reading endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from vivot.app.api.deps import ContextDep, get_mood_aggregator
from vivot.app.models.mood import MoodReading, MoodReadingCreate, MoodResult
from vivot.app.mood.aggregator import MoodAggregator

router = APIRouter(prefix="/trips", tags=["mood"])

AggregatorDep = Annotated[MoodAggregator, Depends(get_mood_aggregator)]


@router.post("/{trip_id}/mood", response_model=MoodResult, status_code=status.HTTP_201_CREATED)
async def record_mood(
    trip_id: str, request: MoodReadingCreate, ctx: ContextDep, aggregator: AggregatorDep
) -> MoodResult:
    """Record the caller's energy level and report whether to pivot."""
    return aggregator.record_mood(ctx, trip_id, request.energy_level)


@router.get("/{trip_id}/mood", response_model=list[MoodReading])
async def list_mood_readings(
    trip_id: str, ctx: ContextDep, aggregator: AggregatorDep
) -> list[MoodReading]:
    """Mood readings, newest first."""
    return aggregator.list_readings(ctx, trip_id)

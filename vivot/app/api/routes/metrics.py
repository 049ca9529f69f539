"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - generator_latency_ms{purpose, outcome}
    - generator_errors_total{purpose, reason}
    - geocode_lookups_total{outcome}
    - mood_readings_total{energy_level, should_pivot}
    - pivot_proposals_total{source}, pivot_commits_total{trigger}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

"""FastAPI dependencies: process-wide collaborators and per-request services.

Singletons are cached factories so tests can swap them through
`app.dependency_overrides`.
"""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Annotated

import redis
from fastapi import Depends, HTTPException, Request, status

from vivot.app.adapters.geocoding import Geocoder, NominatimGeocoder
from vivot.app.api.auth import get_current_context
from vivot.app.config import Settings, get_settings
from vivot.app.db.context import RequestContext
from vivot.app.db.engine import create_engine_from_settings, create_session_factory
from vivot.app.db.inmemory import InMemoryItineraryStore, InMemoryRateLimiter
from vivot.app.db.models import Base
from vivot.app.db.repositories import ItineraryStore, RateLimiter
from vivot.app.db.sql_store import SqlItineraryStore
from vivot.app.discovery.catalog import seed_discoveries
from vivot.app.generation.adaptation import AdaptationAdvisor
from vivot.app.generation.adapter import ItineraryGenerationAdapter
from vivot.app.generation.care_mode import CareModePlanner
from vivot.app.itinerary.service import ItineraryService
from vivot.app.ledger.budget import BudgetLedger
from vivot.app.llm.client import Generator, get_llm_client
from vivot.app.middleware.ratelimit import RateLimitMiddleware, create_default_bucket_map
from vivot.app.mood.aggregator import MoodAggregator, policy_from_settings
from vivot.app.pivot.engine import PivotEngine
from vivot.app.ratelimit import RedisRateLimiter

logger = logging.getLogger(__name__)


@lru_cache
def get_store() -> ItineraryStore:
    """Process-wide itinerary store selected by settings.store_backend."""
    settings = get_settings()

    if settings.store_backend == "sql":
        engine = create_engine_from_settings(settings)
        Base.metadata.create_all(engine)
        logger.info("Using SQL itinerary store")
        store: ItineraryStore = SqlItineraryStore(create_session_factory(engine)())
    else:
        logger.info("Using in-memory itinerary store")
        store = InMemoryItineraryStore()

    seed_discoveries(store)
    return store


@lru_cache
def get_generator() -> Generator:
    """Process-wide generator client."""
    return get_llm_client(get_settings())


@lru_cache
def get_geocoder() -> Geocoder:
    """Process-wide geocoder."""
    settings = get_settings()
    return NominatimGeocoder(
        base_url=settings.geocoder_base_url,
        user_agent=settings.geocoder_user_agent,
        timeout_seconds=settings.geocoder_timeout_seconds,
    )


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """Redis-backed limiter when redis_url is set, in-memory otherwise."""
    settings = get_settings()

    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisRateLimiter(
            client,
            max_requests=settings.generation_requests_per_min,
            window_seconds=settings.rate_limit_window_seconds,
        )

    return InMemoryRateLimiter(
        max_requests=settings.generation_requests_per_min,
        window_seconds=settings.rate_limit_window_seconds,
    )


StoreDep = Annotated[ItineraryStore, Depends(get_store)]
GeneratorDep = Annotated[Generator, Depends(get_generator)]
ContextDep = Annotated[RequestContext, Depends(get_current_context)]


def get_rate_limit_middleware(
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> RateLimitMiddleware:
    return RateLimitMiddleware(limiter, create_default_bucket_map())


async def enforce_rate_limit(
    request: Request,
    ctx: ContextDep,
    middleware: Annotated[RateLimitMiddleware, Depends(get_rate_limit_middleware)],
) -> None:
    """Reject the request with 429 when the caller's bucket is exhausted."""
    allowed, retry_after = middleware.check_rate_limit(request.url.path, ctx, datetime.now())
    if not allowed:
        logger.warning(f"Rate limit exceeded for user {ctx.user_id} on {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(retry_after)},
        )


def get_ledger(store: StoreDep) -> BudgetLedger:
    return BudgetLedger(store)


def get_itinerary_service(store: StoreDep) -> ItineraryService:
    return ItineraryService(store)


def get_mood_aggregator(
    store: StoreDep, settings: Annotated[Settings, Depends(get_settings)]
) -> MoodAggregator:
    return MoodAggregator(store, policy_from_settings(settings))


def get_pivot_engine(store: StoreDep, generator: GeneratorDep) -> PivotEngine:
    return PivotEngine(store, generator)


def get_generation_adapter(
    store: StoreDep,
    generator: GeneratorDep,
    geocoder: Annotated[Geocoder, Depends(get_geocoder)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ItineraryGenerationAdapter:
    return ItineraryGenerationAdapter(
        store, generator, geocoder, max_geocode_lookups=settings.geocode_max_lookups
    )


def get_care_mode_planner(store: StoreDep, generator: GeneratorDep) -> CareModePlanner:
    return CareModePlanner(store, generator)


def get_adaptation_advisor(store: StoreDep, generator: GeneratorDep) -> AdaptationAdvisor:
    return AdaptationAdvisor(store, generator)

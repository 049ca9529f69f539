"""Health check endpoints.

- /health reports liveness and always answers 200
- /healthz checks the configured store and Redis and answers 503 when
  either is unreachable
"""

from typing import Any

import redis
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vivot.app.config import Settings, get_settings
from vivot.app.db.engine import create_engine_from_settings

router = APIRouter()


async def check_store(settings: Settings) -> tuple[bool, str]:
    """Probe the configured itinerary store; the memory store is always up."""
    if settings.store_backend == "memory":
        return (True, "memory")

    try:
        engine = create_engine_from_settings(settings)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        finally:
            engine.dispose()
        return (True, "ok")
    except (SQLAlchemyError, ValueError) as e:
        return (False, f"error: {type(e).__name__}")


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Ping the rate-limit Redis when one is configured."""
    if not settings.redis_url:
        return (True, "not_configured")

    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        client.ping()
        return (True, "ok")
    except redis.RedisError as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | JSONResponse:
    """Readiness check reporting store, Redis and generator mode."""
    settings = get_settings()

    store_ok, store_status = await check_store(settings)
    redis_ok, redis_status = await check_redis(settings)
    api_key = settings.openai_api_key
    generator_status = "openai" if api_key and api_key.get_secret_value() else "stub"

    ready = store_ok and redis_ok
    body = {
        "status": "ok" if ready else "degraded",
        "components": {
            "store": store_status,
            "redis": redis_status,
            "generator": generator_status,
        },
    }

    if not ready:
        return JSONResponse(content=body, status_code=503)
    return body

"""Tests for rate limiting."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

from vivot.app.db.context import RequestContext
from vivot.app.db.inmemory import InMemoryRateLimiter
from vivot.app.middleware.ratelimit import RateLimitMiddleware, create_default_bucket_map
from vivot.app.ratelimit import (
    GENERATION_BUCKET,
    RedisRateLimiter,
    make_rate_limit_key,
    window_start,
)


def test_in_memory_limiter_admits_up_to_quota() -> None:
    limiter = InMemoryRateLimiter(max_requests=5, window_seconds=60)
    now = datetime.now()

    for i in range(5):
        assert limiter.check_quota("alice:generation", now + timedelta(seconds=i)) is None


def test_in_memory_limiter_reports_time_left_in_window() -> None:
    limiter = InMemoryRateLimiter(max_requests=3, window_seconds=60)
    now = datetime.now()

    for _ in range(3):
        assert limiter.check_quota("alice:generation", now) is None

    retry_after = limiter.check_quota("alice:generation", now + timedelta(seconds=20))
    assert retry_after is not None
    assert retry_after.seconds == 40


def test_in_memory_limiter_opens_new_window() -> None:
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60)
    now = datetime.now()

    limiter.check_quota("alice:generation", now)
    limiter.check_quota("alice:generation", now)
    assert limiter.check_quota("alice:generation", now) is not None

    assert limiter.check_quota("alice:generation", now + timedelta(seconds=61)) is None


def test_callers_have_independent_quotas() -> None:
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60)
    now = datetime.now()

    limiter.check_quota("alice:generation", now)
    limiter.check_quota("alice:generation", now)
    assert limiter.check_quota("alice:generation", now) is not None

    assert limiter.check_quota("bob:generation", now) is None


def test_make_rate_limit_key_defaults_to_generation_bucket() -> None:
    ctx = RequestContext(user_id="alice")

    assert make_rate_limit_key(ctx) == "alice:generation"
    assert make_rate_limit_key(ctx, "other") == "alice:other"


def test_window_start_aligns_to_window() -> None:
    opened = window_start(datetime(2026, 1, 1, 12, 0, 43), 60)

    assert opened % 60 == 0
    assert window_start(datetime(2026, 1, 1, 12, 0, 5), 60) == opened


def test_redis_rate_limiter_sets_expiry_on_first_hit() -> None:
    """Test the INCR + EXPIRE fixed window against a mocked Redis client."""
    client = MagicMock()
    client.incr.return_value = 1
    limiter = RedisRateLimiter(client, max_requests=2, window_seconds=60)
    now = datetime(2026, 1, 1, 12, 0, 30)

    assert limiter.check_quota("alice:generation", now) is None

    redis_key = client.incr.call_args.args[0]
    assert redis_key.startswith("vivot:ratelimit:alice:generation:")
    client.expire.assert_called_once_with(redis_key, 60)


def test_redis_rate_limiter_blocks_with_ttl() -> None:
    client = MagicMock()
    client.incr.return_value = 3
    client.ttl.return_value = 17
    limiter = RedisRateLimiter(client, max_requests=2, window_seconds=60)

    retry_after = limiter.check_quota("alice:generation", datetime(2026, 1, 1, 12, 0, 43))

    assert retry_after is not None
    assert retry_after.seconds == 17
    client.expire.assert_not_called()


def test_rate_limit_middleware_blocks_generation_routes() -> None:
    """Test that chat, pivot and Care Mode draw from one bucket."""
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60)
    middleware = RateLimitMiddleware(limiter, create_default_bucket_map())
    ctx = RequestContext(user_id="alice")
    now = datetime.now()

    assert middleware.check_rate_limit("/chat/send", ctx, now) == (True, 0)
    assert middleware.check_rate_limit("/trips/t1/pivot", ctx, now) == (True, 0)

    allowed, retry_after = middleware.check_rate_limit("/trips/t1/care-mode", ctx, now)
    assert allowed is False
    assert retry_after > 0


def test_rate_limit_middleware_no_limit_for_unmapped_path() -> None:
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60)
    middleware = RateLimitMiddleware(limiter, create_default_bucket_map())
    ctx = RequestContext(user_id="alice")
    now = datetime.now()

    for _ in range(3):
        assert middleware.check_rate_limit("/trips/t1/pivot/confirm", ctx, now) == (True, 0)
        assert middleware.check_rate_limit("/trips", ctx, now) == (True, 0)


def test_default_bucket_map_covers_generator_routes() -> None:
    bucket_map = create_default_bucket_map()

    assert set(bucket_map) == {"/chat/send", "/pivot", "/care-mode", "/adapt"}
    assert set(bucket_map.values()) == {GENERATION_BUCKET}


def test_bucket_for_matches_suffixes() -> None:
    limiter = InMemoryRateLimiter(max_requests=1)
    middleware = RateLimitMiddleware(limiter, create_default_bucket_map())

    assert middleware.bucket_for("/trips/t1/pivot/") == GENERATION_BUCKET
    assert middleware.bucket_for("/trips/t1/adapt") == GENERATION_BUCKET
    assert middleware.bucket_for("/trips/t1/pivot/confirm") is None
    assert middleware.bucket_for("/trips/t1/pivots") is None

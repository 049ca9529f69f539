"""Per-caller quotas for generator-backed routes.

Every route that reaches the generator shares one fixed window per caller, so
a client cannot dodge its quota by alternating between chat, pivot and Care
Mode calls.
"""

from datetime import datetime

import redis

from vivot.app.db.context import RequestContext
from vivot.app.db.repositories import RetryAfter

GENERATION_BUCKET = "generation"


def make_rate_limit_key(ctx: RequestContext, bucket: str = GENERATION_BUCKET) -> str:
    """Quota key for one caller and bucket, e.g. "alice:generation"."""
    return f"{ctx.user_id}:{bucket}"


def window_start(now: datetime, window_seconds: int) -> int:
    """Epoch second at which the fixed window containing ``now`` opened."""
    epoch = int(now.timestamp())
    return epoch - epoch % window_seconds


class RedisRateLimiter:
    """Fixed-window quota shared across processes through Redis.

    Each window is its own counter key; INCR counts the request and the first
    hit sets the key to expire with the window.
    """

    def __init__(
        self, redis_client: redis.Redis, max_requests: int, window_seconds: int = 60
    ) -> None:
        self._redis = redis_client
        self._max_requests = max_requests
        self._window_seconds = window_seconds

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Count one request against ``key``.

        Returns:
            None when the request fits the window, otherwise how long the
            caller should wait
        """
        opened = window_start(now, self._window_seconds)
        counter = f"vivot:ratelimit:{key}:{opened}"

        hits = int(self._redis.incr(counter))  # type: ignore[arg-type]
        if hits == 1:
            self._redis.expire(counter, self._window_seconds)
        if hits <= self._max_requests:
            return None

        remaining = int(self._redis.ttl(counter))  # type: ignore[arg-type]
        if remaining < 0:
            # Key lost its expiry; fall back to the window arithmetic
            remaining = opened + self._window_seconds - int(now.timestamp())
        return RetryAfter(seconds=max(1, remaining))

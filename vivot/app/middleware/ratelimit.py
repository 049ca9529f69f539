"""Route-level quota enforcement."""

from datetime import datetime

from vivot.app.db.context import RequestContext
from vivot.app.db.repositories import RateLimiter
from vivot.app.ratelimit import GENERATION_BUCKET, make_rate_limit_key

# Path suffix -> bucket. Pivot confirmation never calls the generator.
_GENERATION_SUFFIXES = ("/chat/send", "/pivot", "/care-mode", "/adapt")


def create_default_bucket_map() -> dict[str, str]:
    """Suffixes of every generator-backed route, all in the generation bucket."""
    return {suffix: GENERATION_BUCKET for suffix in _GENERATION_SUFFIXES}


class RateLimitMiddleware:
    """Resolves a request path to its bucket and charges the caller's quota.

    Paths that match no suffix in ``bucket_map`` are never limited.
    """

    def __init__(self, limiter: RateLimiter, bucket_map: dict[str, str]) -> None:
        self._limiter = limiter
        self._bucket_map = bucket_map

    def bucket_for(self, path: str) -> str | None:
        trimmed = path.rstrip("/")
        return next(
            (bucket for suffix, bucket in self._bucket_map.items() if trimmed.endswith(suffix)),
            None,
        )

    def check_rate_limit(
        self, path: str, ctx: RequestContext, now: datetime | None = None
    ) -> tuple[bool, int]:
        """Charge one request for ``ctx`` on ``path``.

        Returns:
            (allowed, retry_after_seconds); retry_after is 0 when allowed
        """
        bucket = self.bucket_for(path)
        if bucket is None:
            return (True, 0)

        verdict = self._limiter.check_quota(
            make_rate_limit_key(ctx, bucket), now or datetime.now()
        )
        return (True, 0) if verdict is None else (False, verdict.seconds)

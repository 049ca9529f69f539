"""Request context carrying the caller identity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the caller identity.

    Passed explicitly through every operation; trip ownership checks compare
    against `user_id`.
    """

    user_id: str

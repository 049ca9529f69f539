"""Caller identity dependency.

The caller passes its identity explicitly as "Authorization: Bearer <user_id>".
There is no ambient default user: requests without a usable header are 401.
"""

import re
from typing import Annotated

from fastapi import Header, HTTPException, status

from vivot.app.db.context import RequestContext

_USER_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@\-]{0,127}$")


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer alice")

    Returns:
        RequestContext with user_id

    Raises:
        HTTPException: 401 if the header is missing or malformed
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "

    if not _USER_ID.match(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token (expected a user id)",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return RequestContext(user_id=token)

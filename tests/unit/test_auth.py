"""Unit tests for the caller identity dependency."""

import pytest
from fastapi import HTTPException

from vivot.app.api.auth import get_current_context


@pytest.mark.asyncio
async def test_get_current_context_valid_user_id() -> None:
    ctx = await get_current_context(authorization="Bearer alice@example.com")

    assert ctx.user_id == "alice@example.com"


@pytest.mark.asyncio
async def test_get_current_context_missing_header() -> None:
    """Test that there is no default user when the header is absent."""
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization=None)

    assert exc_info.value.status_code == 401
    assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


@pytest.mark.asyncio
async def test_get_current_context_invalid_bearer_format() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization="Basic YWxpY2U6c2VjcmV0")

    assert exc_info.value.status_code == 401
    assert "Invalid authorization header format" in exc_info.value.detail


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["", "   ", "alice bob", "-alice", "a" * 129, "alice/../bob"])
async def test_get_current_context_invalid_user_id(token: str) -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization=f"Bearer {token}")

    assert exc_info.value.status_code == 401

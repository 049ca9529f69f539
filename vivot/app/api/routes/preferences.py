"""User preference endpoints."""

from fastapi import APIRouter

from vivot.app.api.deps import ContextDep, StoreDep
from vivot.app.itinerary.preferences import load_preferences, update_preferences
from vivot.app.models.preferences import PreferencesUpdate, UserPreferences

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=UserPreferences)
async def get_preferences(ctx: ContextDep, store: StoreDep) -> UserPreferences:
    """The caller's preferences; defaults are created on first read."""
    return load_preferences(store, ctx)


@router.patch("", response_model=UserPreferences)
async def patch_preferences(
    request: PreferencesUpdate, ctx: ContextDep, store: StoreDep
) -> UserPreferences:
    """Merge a partial preferences update."""
    return update_preferences(store, ctx, request)

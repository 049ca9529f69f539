"""User preference lookups with first-read defaults."""

import logging

from vivot.app.db.context import RequestContext
from vivot.app.db.repositories import ItineraryStore
from vivot.app.models.preferences import PreferencesUpdate, UserPreferences

logger = logging.getLogger(__name__)


def load_preferences(store: ItineraryStore, ctx: RequestContext) -> UserPreferences:
    """Get the caller's preferences, creating the default record on first read."""
    prefs = store.get_preferences(ctx.user_id)
    if prefs is None:
        logger.info(f"Creating default preferences for user {ctx.user_id}")
        prefs = store.save_preferences(UserPreferences(user_id=ctx.user_id))
    return prefs


def update_preferences(
    store: ItineraryStore, ctx: RequestContext, patch: PreferencesUpdate
) -> UserPreferences:
    """Merge a partial update into the caller's preferences."""
    with store.transaction():
        current = load_preferences(store, ctx)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        return store.save_preferences(current.model_copy(update=changes))

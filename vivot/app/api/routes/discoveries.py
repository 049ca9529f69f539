"""Discovery catalog endpoints."""

from fastapi import APIRouter

from vivot.app.api.deps import ContextDep, StoreDep
from vivot.app.models.discovery import FEATURED_LIMIT, FEATURED_MIN_RATING, Discovery

router = APIRouter(prefix="/discoveries", tags=["discoveries"])


@router.get("", response_model=list[Discovery])
async def list_discoveries(ctx: ContextDep, store: StoreDep) -> list[Discovery]:
    """Every place in the catalog, newest first."""
    return store.list_discoveries()


@router.get("/featured", response_model=list[Discovery])
async def list_featured_discoveries(ctx: ContextDep, store: StoreDep) -> list[Discovery]:
    return store.list_featured_discoveries(FEATURED_MIN_RATING, FEATURED_LIMIT)

"""Hot-search (trend tag) endpoint."""

from fastapi import APIRouter, Depends

from backend.deps import get_storage
from gossip_world.storage import Storage

router = APIRouter()

HOT_SEARCH_LIMIT = 10


@router.get("/hot-search")
async def hot_search(storage: Storage = Depends(get_storage)):
    """Top trend tags by count."""
    return storage.list_trends(limit=HOT_SEARCH_LIMIT)

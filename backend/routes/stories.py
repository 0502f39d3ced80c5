"""Story read endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from backend.deps import get_storage
from gossip_world.models import INSTANT_TYPES, STORY_TYPES
from gossip_world.storage import Storage

router = APIRouter()


@router.get("/stories")
async def list_stories(
    limit: int = 20, type: str | None = None, storage: Storage = Depends(get_storage)
):
    """Published stories, hottest first, optionally of one type."""
    if type is not None and type not in STORY_TYPES + INSTANT_TYPES:
        raise HTTPException(400, f"Unknown story type '{type}'")
    return storage.list_stories(limit=limit, type=type)


@router.get("/stories/{story_id}")
async def get_story(story_id: str, storage: Storage = Depends(get_storage)):
    story = storage.view_story(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    return story

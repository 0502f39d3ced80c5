"""Actor read and mood endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from backend.deps import get_storage
from gossip_world.storage import Storage

from .models import UpdateActor

router = APIRouter()


@router.get("/actors")
async def list_actors(storage: Storage = Depends(get_storage)):
    """List all AI personas."""
    return storage.list_actors()


@router.get("/actors/{actor_id}")
async def get_actor(actor_id: str, storage: Storage = Depends(get_storage)):
    actor = storage.get_actor(actor_id)
    if not actor:
        raise HTTPException(404, "Actor not found")
    return actor


@router.patch("/actors/{actor_id}")
async def update_actor(
    actor_id: str, body: UpdateActor, storage: Storage = Depends(get_storage)
):
    """Set an actor's current mood tag."""
    actor = storage.set_mood(actor_id, body.mood)
    if not actor:
        raise HTTPException(404, "Actor not found")
    return actor

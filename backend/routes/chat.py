"""Chat room and message read endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from backend.deps import get_storage
from gossip_world.storage import Storage

router = APIRouter()


@router.get("/chat/rooms")
async def list_rooms(storage: Storage = Depends(get_storage)):
    """Active rooms, most recently active first, with message counts."""
    return [
        {**room.model_dump(mode="json"), "message_count": storage.count_messages(room.id)}
        for room in storage.list_rooms()
    ]


@router.get("/chat/{room_id}/messages")
async def list_messages(
    room_id: str,
    limit: int = 50,
    before: datetime | None = None,
    storage: Storage = Depends(get_storage),
):
    """A page of a room's messages, oldest first. `before` pages backwards."""
    if storage.get_room(room_id) is None:
        raise HTTPException(404, "Room not found")
    messages = storage.list_messages(room_id, limit=limit, before=before)
    actors = {a.id: a for a in storage.get_actors(m.actor_id for m in messages)}
    data = []
    for m in messages:
        actor = actors.get(m.actor_id)
        data.append({
            **m.model_dump(mode="json"),
            "actor": {
                "id": actor.id,
                "name": actor.name,
                "avatar": actor.avatar,
                "mood": actor.mood,
            } if actor else None,
        })
    return {"messages": data, "has_more": len(messages) == limit}

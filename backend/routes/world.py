"""World setup and the generate-chat pipeline endpoint."""

from fastapi import APIRouter, Cookie, Depends, HTTPException

from backend.deps import get_credentials, get_gateway, get_storage
from gossip_world.credentials import CredentialSource
from gossip_world.llm import Gateway
from gossip_world.pipeline import ActorError, ensure_actor, generate_chat, init_default_rooms
from gossip_world.storage import Storage

from .models import CreateActorBody, GenerateChatBody

router = APIRouter()


@router.post("/world/init")
async def init_world(storage: Storage = Depends(get_storage)):
    """Create the default chat rooms (idempotent)."""
    rooms = init_default_rooms(storage)
    return {"rooms": [r.name for r in rooms]}


@router.post("/world/actors", status_code=201)
async def create_actor(body: CreateActorBody, storage: Storage = Depends(get_storage)):
    """Create the AI persona for a human, or return the existing one."""
    try:
        actor_id = ensure_actor(storage, body.human_id)
    except ActorError:
        raise HTTPException(404, "Human not found")
    return {"actor_id": actor_id}


@router.post("/world/generate-chat")
async def world_generate_chat(
    body: GenerateChatBody,
    user_id: str | None = Cookie(default=None),
    storage: Storage = Depends(get_storage),
    gateway: Gateway = Depends(get_gateway),
    credentials: CredentialSource = Depends(get_credentials),
):
    """Run one chat round in a room, mine it, and publish the best stories."""
    if storage.get_room(body.room_id) is None:
        raise HTTPException(404, "Room not found")

    config = storage.get_config()
    report = await generate_chat(
        storage=storage,
        gateway=gateway,
        credentials=credentials,
        room_id=body.room_id,
        human_id=body.human_id or user_id,
        topic=body.topic,
        publish_threshold=float(config["publish_threshold"]),
        pause=tuple(config["round_pause"]),
    )
    return {
        "messages_created": len(report.round.messages),
        "skipped": report.round.skipped,
        "stories_created": report.stories_created,
        "story_ids": report.story_ids,
    }

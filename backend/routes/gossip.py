"""Gossip feed, detail, fire and instant-generation endpoints."""

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response

from backend.deps import get_credentials, get_gateway, get_storage
from gossip_world.credentials import CredentialSource
from gossip_world.llm import Gateway
from gossip_world.models import INSTANT_TYPES, Interaction
from gossip_world.pipeline import Skipped, generate_instant_gossip
from gossip_world.storage import Storage

from .models import GenerateGossipBody

router = APIRouter()


def _actor_card(storage: Storage, actor_id: str) -> dict | None:
    actor = storage.get_actor(actor_id)
    if not actor:
        return None
    return {"id": actor.id, "name": actor.name, "avatar": actor.avatar}


@router.get("/gossip")
async def list_gossip(
    page: int = 1, limit: int = 10, storage: Storage = Depends(get_storage)
):
    """Published articles, hottest first, with paging info."""
    page = max(page, 1)
    articles = storage.list_gossip(page=page, limit=limit)
    total = storage.count_gossip()
    return {
        "gossips": articles,
        "page": page,
        "limit": limit,
        "total": total,
        "has_more": page * limit < total,
    }


@router.get("/gossip/{gossip_id}")
async def get_gossip(gossip_id: str, storage: Storage = Depends(get_storage)):
    """One article with its story, the characters involved and evidence messages.

    Each read counts as a view.
    """
    article = storage.get_gossip(gossip_id)
    if not article or article.removed:
        raise HTTPException(404, "Gossip not found")
    article = storage.view_gossip(gossip_id)

    story = storage.get_story(article.story_id)
    characters: list[dict] = []
    evidence: list[dict] = []
    if story:
        for actor_id in [story.main_actor_id, *story.other_actor_ids]:
            card = _actor_card(storage, actor_id)
            if card:
                characters.append(card)
        for message in storage.get_messages_by_ids(story.message_ids):
            evidence.append({
                **message.model_dump(mode="json"),
                "actor": _actor_card(storage, message.actor_id),
            })

    return {
        **article.model_dump(mode="json"),
        "story": story.model_dump(mode="json") if story else None,
        "characters": characters,
        "evidence_messages": evidence,
    }


@router.post("/gossip/{gossip_id}/fire")
async def fire_gossip(
    gossip_id: str,
    user_id: str | None = Cookie(default=None),
    storage: Storage = Depends(get_storage),
):
    """Add one "fire" reaction. Anonymous reactions depend on settings."""
    if not user_id and not storage.get_config()["allow_anonymous_fire"]:
        raise HTTPException(401, "Login required")

    article = storage.fire_gossip(gossip_id)
    if not article:
        raise HTTPException(404, "Gossip not found")

    if user_id:
        storage.record_interaction(Interaction(
            human_id=user_id, target_type="gossip", target_id=gossip_id
        ))
    return {"fire_count": article.fire_count}


@router.post("/gossip/generate", status_code=201)
async def generate_gossip(
    body: GenerateGossipBody,
    response: Response,
    user_id: str | None = Cookie(default=None),
    storage: Storage = Depends(get_storage),
    gateway: Gateway = Depends(get_gateway),
    credentials: CredentialSource = Depends(get_credentials),
):
    """Fabricate a roast / ship / hype article about one actor.

    A ship with nobody to pair is a normal result: 200 with a skipped body.
    """
    if not user_id:
        raise HTTPException(401, "Login required")
    if body.type not in INSTANT_TYPES:
        raise HTTPException(400, f"Unknown gossip type '{body.type}'")

    target = storage.get_actor(body.target_actor_id)
    if not target:
        raise HTTPException(404, "Actor not found")

    outcome = await generate_instant_gossip(
        storage=storage,
        gateway=gateway,
        credentials=credentials,
        target=target,
        category=body.type,
    )
    if isinstance(outcome, Skipped):
        response.status_code = 200
        return {"status": "skipped", "reason": outcome.reason}
    return outcome.value

"""Persona builder - turns a human profile into an actor's persona text
and reusable system prompt, and creates the actor once per human."""

import logging

from gossip_world.models import Actor, Human
from gossip_world.prompts import SYSTEM_PROMPT, render_prompt
from gossip_world.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_HUMAN_NAME = "Mystery Human"
DEFAULT_ACTOR_NAME = "Mystery AI"


class ActorError(LookupError):
    """Raised when an actor cannot be created for a human."""


def build_persona(
    name: str,
    bio: str | None = None,
    interests: list[str] | None = None,
    personality: str | None = None,
) -> str:
    """Bio, then interests, then personality; a generic line if all are empty."""
    parts: list[str] = []
    if bio:
        parts.append(bio)
    if interests:
        parts.append(f"Interests: {', '.join(interests)}")
    if personality:
        parts.append(f"Personality: {personality}")
    if not parts:
        return f"{name}'s AI persona. Easygoing and loves to chat."
    return "; ".join(parts)


def build_system_prompt(persona: str, name: str) -> str:
    return render_prompt(SYSTEM_PROMPT, {"name": name, "persona": persona})


def new_actor(human: Human) -> Actor:
    persona = build_persona(
        human.name or DEFAULT_HUMAN_NAME,
        bio=human.bio,
        interests=human.interests,
        personality=human.personality,
    )
    name = human.name or DEFAULT_ACTOR_NAME
    return Actor(
        human_id=human.id,
        name=name,
        avatar=human.avatar,
        persona=persona,
        system_prompt=build_system_prompt(persona, name),
        interests=list(human.interests),
    )


def ensure_actor(storage: Storage, human_id: str) -> str:
    """Return the id of the human's actor, creating it on first call."""
    human = storage.get_human(human_id)
    if human is None:
        raise ActorError(f"Human {human_id!r} not found")

    existing = storage.get_actor_by_human(human_id)
    if existing is not None:
        return existing.id

    actor = storage.create_actor(new_actor(human))
    logger.info("Created actor %s for human %s", actor.name, human_id)
    return actor.id

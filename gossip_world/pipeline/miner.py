"""Story miner - classifies a room's recent transcript into story candidates.

The miner is permissive: it returns everything at or above MINER_THRESHOLD
and leaves the stricter publication cut to the caller.
"""

import logging

from gossip_world.credentials import CredentialSource
from gossip_world.llm import Gateway
from gossip_world.models import STORY_TYPES, Message, StoryCandidate
from gossip_world.prompts import MINER_PROMPT, render_prompt
from gossip_world.storage import Storage

from .parsing import Malformed, parse_model_json

logger = logging.getLogger(__name__)

HISTORY_SIZE = 100
MIN_MESSAGES = 5
EVIDENCE_LIMIT = 10
DEFAULT_CONFIDENCE = 0.7
MINER_THRESHOLD = 0.6
FALLBACK_TYPE = "weird"


def map_story_type(value) -> str:
    """Coerce a model-supplied category into the closed set."""
    if isinstance(value, str):
        key = value.strip().lower()
        if key in STORY_TYPES:
            return key
    return FALLBACK_TYPE


def _confidence(value) -> float:
    if isinstance(value, bool) or value is None:
        return DEFAULT_CONFIDENCE
    try:
        score = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    return min(max(score, 0.0), 1.0)


def parse_stories(text: str) -> list[dict]:
    """Raw story detections from a model reply; [] when nothing is recoverable."""
    result = parse_model_json(text)
    if isinstance(result, Malformed):
        logger.warning("Miner output is not recoverable JSON: %r", text[:200])
        return []
    stories = result.data.get("stories")
    if not isinstance(stories, list):
        return []
    return [s for s in stories if isinstance(s, dict)]


def resolve_candidates(
    storage: Storage, stories: list[dict], messages: list[Message]
) -> list[StoryCandidate]:
    """Resolve actor names, attach evidence messages, apply the miner cut."""
    candidates: list[StoryCandidate] = []
    for story in stories:
        names = story.get("avatars") or []
        if not isinstance(names, list):
            continue
        actors = storage.find_actors_by_names(n for n in names if isinstance(n, str))
        if not actors:
            logger.debug("Dropping story with unknown actors: %r", names)
            continue

        actor_ids = [a.id for a in actors]
        evidence_ids = [m.id for m in messages if m.actor_id in actor_ids]
        title = story.get("title")

        candidates.append(StoryCandidate(
            type=map_story_type(story.get("type")),
            actor_ids=actor_ids,
            message_ids=evidence_ids[:EVIDENCE_LIMIT],
            evidence=str(story.get("evidence") or ""),
            confidence=_confidence(story.get("confidence")),
            title=title if isinstance(title, str) and title.strip() else None,
        ))

    return [c for c in candidates if c.confidence >= MINER_THRESHOLD]


async def mine_stories(
    *,
    storage: Storage,
    gateway: Gateway,
    credentials: CredentialSource,
    room_id: str,
) -> list[StoryCandidate]:
    """Mine the room's latest messages. Never raises on gateway or parse failure."""
    messages = storage.recent_messages(room_id, HISTORY_SIZE)
    if len(messages) < MIN_MESSAGES:
        return []

    names = {a.id: a.name for a in storage.get_actors(m.actor_id for m in messages)}
    transcript = "\n".join(
        f"[{names.get(m.actor_id, 'unknown')}]: {m.content}" for m in messages
    )

    token = await credentials.any()
    if not token:
        logger.warning("No credential available for story mining")
        return []

    try:
        reply = await gateway(
            "miner", token, render_prompt(MINER_PROMPT, {"transcript": transcript})
        )
    except Exception as e:
        logger.warning("Story mining failed for room %s: %s", room_id, e)
        return []

    return resolve_candidates(storage, parse_stories(reply.text), messages)

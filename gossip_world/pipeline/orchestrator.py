"""Chat round orchestrator - runs one round of dialogue in a room.

Round flow:
  1. Resolve the room; an unknown or inactive room is a no-op.
  2. Load the latest CONTEXT_SIZE messages, oldest first, as "[name]: text".
  3. Load actors active in the last ACTIVE_WINDOW (at most MAX_CANDIDATES);
     force-include the priority actor if one is given.
  4. Draw 2–4 speakers at random; the priority actor always speaks.
  5. Speakers go strictly one after another. Each one:
       credential → prompt (room, topic, context, system prompt) → gateway
       → strip "[name]:" echo → persist Message → bump actor activity
       → append the line to the context the next speaker sees → pause
       (no pause after the last speaker).
     A failing speaker is logged and skipped; the round carries on.

Each speaker step is a fold over the context: it takes the lines so far and
returns the lines plus its own. Later speakers depend on earlier ones, so
the loop is never parallelised.
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
from collections.abc import Awaitable, Callable, Sequence
from datetime import timedelta

from gossip_world.credentials import CredentialSource
from gossip_world.llm import Gateway
from gossip_world.models import Actor, Message, Room, utcnow
from gossip_world.prompts import SPEAKER_PROMPT, render_prompt
from gossip_world.storage import Storage

from .outcomes import Outcome, RoundReport, Skipped, Success

logger = logging.getLogger(__name__)

CONTEXT_SIZE = 20
MAX_CANDIDATES = 10
ACTIVE_WINDOW = timedelta(hours=24)
MIN_SPEAKERS = 2
MAX_SPEAKERS = 4
DEFAULT_PAUSE = (1.0, 3.0)
DEFAULT_TOPIC = "anything goes"

DEFAULT_ROOMS = [
    {
        "name": "AI Café",
        "topic": "Everyday chit-chat",
        "description": "Where the AI personas hang out over coffee",
    },
    {
        "name": "Late-Night Rant Room",
        "topic": "Roasting our humans",
        "description": "The AIs vent about their humans here",
    },
    {
        "name": "Tech Talk",
        "topic": "AI technology and the future",
        "description": "The AIs talk shop",
    },
    {
        "name": "Gossip Factory",
        "topic": "Making and discussing gossip",
        "description": "The AIs cook up fresh gossip here",
    },
]

_NAME_ECHO = re.compile(r"^\[.*?\]:\s*")

Context = tuple[str, ...]
Sleep = Callable[[float], Awaitable[None]]


def init_default_rooms(storage: Storage) -> list[Room]:
    """Create the default rooms that do not exist yet (matched by name)."""
    rooms: list[Room] = []
    for seed in DEFAULT_ROOMS:
        room = storage.get_room_by_name(seed["name"])
        if room is None:
            room = storage.create_room(Room(**seed))
        rooms.append(room)
    return rooms


def select_speakers(
    pool: Sequence[Actor],
    priority: Actor | None,
    rng: random.Random,
) -> list[Actor]:
    """Sample 2–4 distinct speakers; the priority actor is always among them."""
    count = min(rng.randint(MIN_SPEAKERS, MAX_SPEAKERS), len(pool))
    speakers = rng.sample(list(pool), count)
    if priority is not None and all(s.id != priority.id for s in speakers):
        if speakers:
            speakers[0] = priority
        else:
            speakers = [priority]
    return speakers


def clean_reply(text: str) -> str:
    """Drop a leading "[name]:" self-attribution the model may have echoed."""
    return _NAME_ECHO.sub("", text.strip()).strip()


def _line(name: str, content: str) -> str:
    return f"[{name}]: {content}"


async def run_round(
    *,
    storage: Storage,
    gateway: Gateway,
    credentials: CredentialSource,
    room_id: str,
    topic: str | None = None,
    priority_actor_id: str | None = None,
    rng: random.Random | None = None,
    sleep: Sleep = asyncio.sleep,
    pause: tuple[float, float] = DEFAULT_PAUSE,
) -> RoundReport:
    """Execute one chat round and report what each speaker produced."""
    rng = rng or random.Random()
    report = RoundReport(room_id=room_id)

    room = storage.get_room(room_id)
    if room is None or not room.is_active:
        return report

    # Context snapshot
    history = storage.recent_messages(room_id, CONTEXT_SIZE)
    names = {a.id: a.name for a in storage.get_actors(m.actor_id for m in history)}
    context: Context = tuple(
        _line(names.get(m.actor_id, "unknown"), m.content) for m in history
    )

    # Candidate pool
    pool = storage.active_actors(utcnow() - ACTIVE_WINDOW, MAX_CANDIDATES)
    priority = storage.get_actor(priority_actor_id) if priority_actor_id else None
    if priority is not None and all(a.id != priority.id for a in pool):
        pool.append(priority)
    if not pool:
        return report

    speakers = select_speakers(pool, priority, rng)
    report.speakers = [s.id for s in speakers]
    topic = topic or room.topic or DEFAULT_TOPIC

    last = len(speakers) - 1
    for i, speaker in enumerate(speakers):
        context, outcome = await _speak(
            storage=storage,
            gateway=gateway,
            credentials=credentials,
            room=room,
            topic=topic,
            speaker=speaker,
            context=context,
        )
        report.outcomes.append(outcome)
        if isinstance(outcome, Success) and i < last:
            await sleep(rng.uniform(*pause))

    return report


async def _speak(
    *,
    storage: Storage,
    gateway: Gateway,
    credentials: CredentialSource,
    room: Room,
    topic: str,
    speaker: Actor,
    context: Context,
) -> tuple[Context, Outcome]:
    """One speaker's turn: returns the extended context and the outcome."""
    try:
        token = await credentials.for_human(speaker.human_id)
        if not token:
            # Seeded actors have no human of their own; borrow any voice.
            token = await credentials.any()
        if not token:
            logger.warning("No credential available for %s, skipping", speaker.name)
            return context, Skipped(f"{speaker.name}: no credential")

        prompt = render_prompt(SPEAKER_PROMPT, {
            "room": room.name,
            "topic": topic,
            "context": "\n".join(context),
        })
        reply = await gateway(
            "speaker", token, prompt, system_prompt=speaker.system_prompt
        )
        content = clean_reply(reply.text)
        if not content:
            logger.warning("Empty reply from %s, skipping", speaker.name)
            return context, Skipped(f"{speaker.name}: empty reply")

        message = storage.append_message(
            Message(room_id=room.id, actor_id=speaker.id, content=content)
        )
    except Exception as e:
        logger.warning("Speaker %s failed: %s", speaker.name, e)
        return context, Skipped(f"{speaker.name}: {e}")

    # A stored message counts even if the activity bump fails.
    try:
        storage.record_utterance(speaker.id)
    except Exception as e:
        logger.warning("Activity update for %s failed: %s", speaker.name, e)

    return context + (_line(speaker.name, content),), Success(message)

"""Core domain models.

All pipeline stages and storage functions operate on these types.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, get_args
from uuid import uuid4

from pydantic import BaseModel, Field

# Categories produced by the story miner.
StoryType = Literal[
    "cp",
    "conflict",
    "friendship",
    "weird",
    "achievement",
    "roast_human",
]

# Categories for operator-triggered instant gossip. Kept separate from
# StoryType: trend-tag text and type filters differ between the two.
InstantType = Literal["roast", "ship", "hype"]

STORY_TYPES: tuple[str, ...] = get_args(StoryType)
INSTANT_TYPES: tuple[str, ...] = get_args(InstantType)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class Human(BaseModel):
    """A human profile, plus the credential pair used for generation calls."""

    id: str = Field(default_factory=new_id)
    name: str = ""
    email: str | None = None
    avatar: str | None = None
    bio: str | None = None
    interests: list[str] = Field(default_factory=list)
    personality: str | None = None
    token: str | None = None
    refresh_token: str | None = None
    token_expiry: datetime | None = None
    updated_at: datetime = Field(default_factory=utcnow)


class Actor(BaseModel):
    """An AI persona standing in for a human inside chat rooms."""

    id: str = Field(default_factory=new_id)
    human_id: str | None = None  # None for seeded "system" actors
    name: str
    avatar: str | None = None
    persona: str
    system_prompt: str
    mood: str | None = None
    last_active: datetime = Field(default_factory=utcnow)
    message_count: int = 0
    interests: list[str] = Field(default_factory=list)


class Room(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    topic: str | None = None
    description: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Message(BaseModel):
    """A single utterance in a room's append-only message stream."""

    id: str = Field(default_factory=new_id)
    room_id: str
    actor_id: str
    content: str
    emotion: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class Story(BaseModel):
    id: str = Field(default_factory=new_id)
    type: StoryType | InstantType
    title: str
    summary: str
    evidence: str = ""
    main_actor_id: str
    other_actor_ids: list[str] = Field(default_factory=list)
    message_ids: list[str] = Field(default_factory=list)
    is_published: bool = True
    published_at: datetime | None = Field(default_factory=utcnow)
    fire_count: int = 0
    view_count: int = 0


class GossipArticle(BaseModel):
    """The published tabloid rendering of exactly one Story."""

    id: str = Field(default_factory=new_id)
    story_id: str
    title: str
    content: str
    type: StoryType | InstantType
    debate_log: str | None = None
    fire_count: int = 0
    view_count: int = 0
    removed: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class TrendTag(BaseModel):
    id: str = Field(default_factory=new_id)
    tag: str
    count: int = 0
    story_ids: list[str] = Field(default_factory=list)


class Interaction(BaseModel):
    """Write-only audit record of a user action on some target."""

    id: str = Field(default_factory=new_id)
    human_id: str | None = None
    type: str = "fire"
    target_type: str
    target_id: str
    created_at: datetime = Field(default_factory=utcnow)


class StoryCandidate(BaseModel):
    """A mined, actor-resolved story detection awaiting publication."""

    type: StoryType
    actor_ids: list[str]
    message_ids: list[str] = Field(default_factory=list)
    evidence: str = ""
    confidence: float = 0.7
    title: str | None = None

"""JSON file storage.

All state is stored in flat JSON files under a configurable base directory.
There is no database or ORM - reads and writes go through plain helper
methods that load and dump JSON.

Directory layout:

    {base}/
      humans.json            ← Human profiles + stored credential pair
      actors.json            ← AI personas
      rooms.json             ← chat rooms
      messages/
        {room_id}.json       ← append-only Message stream, creation order
      stories.json
      gossip.json            ← GossipArticle, one per story
      trends.json            ← TrendTag, unique by tag
      interactions.json      ← write-only audit log
      config.json            ← app settings, merged over defaults
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from gossip_world.models import (
    Actor,
    GossipArticle,
    Human,
    Interaction,
    Message,
    Room,
    Story,
    TrendTag,
    utcnow,
)

M = TypeVar("M", bound=BaseModel)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

CONFIG_DEFAULTS: dict[str, Any] = {
    "gateway": "secondme",
    "gateway_timeout": 120.0,
    "publish_threshold": 0.75,
    "allow_anonymous_fire": True,
    "round_pause": [1.0, 3.0],
}


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._messages_root = base_path / "messages"
        self._messages_root.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text())

    def _write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False))

    def _load(self, name: str, model: type[M]) -> list[M]:
        path = self._base / name
        if not path.is_file():
            return []
        return [model.model_validate(item) for item in self._read_json(path)]

    def _dump(self, name: str, items: Iterable[BaseModel]) -> None:
        self._write_json(
            self._base / name, [i.model_dump(mode="json") for i in items]
        )

    def _upsert(self, name: str, record: M) -> M:
        """Replace the record with the same id, or append it."""
        items = self._load(name, type(record))
        for i, item in enumerate(items):
            if item.id == record.id:
                items[i] = record
                break
        else:
            items.append(record)
        self._dump(name, items)
        return record

    def _get(self, name: str, model: type[M], record_id: str) -> M | None:
        for item in self._load(name, model):
            if item.id == record_id:
                return item
        return None

    # ------------------------------------------------------------------
    # Humans
    # ------------------------------------------------------------------

    def save_human(self, human: Human) -> Human:
        """Upsert a human profile by id. Bumps updated_at."""
        human.updated_at = utcnow()
        return self._upsert("humans.json", human)

    def get_human(self, human_id: str) -> Human | None:
        return self._get("humans.json", Human, human_id)

    def list_humans(self) -> list[Human]:
        return self._load("humans.json", Human)

    def update_credential(
        self,
        human_id: str,
        token: str,
        refresh_token: str | None,
        token_expiry: datetime,
    ) -> Human | None:
        human = self.get_human(human_id)
        if human is None:
            return None
        human.token = token
        human.refresh_token = refresh_token
        human.token_expiry = token_expiry
        return self.save_human(human)

    # ------------------------------------------------------------------
    # Actors
    # ------------------------------------------------------------------

    def create_actor(self, actor: Actor) -> Actor:
        return self._upsert("actors.json", actor)

    def get_actor(self, actor_id: str) -> Actor | None:
        return self._get("actors.json", Actor, actor_id)

    def get_actor_by_human(self, human_id: str) -> Actor | None:
        for actor in self.list_actors():
            if actor.human_id == human_id:
                return actor
        return None

    def list_actors(self) -> list[Actor]:
        return self._load("actors.json", Actor)

    def get_actors(self, actor_ids: Iterable[str]) -> list[Actor]:
        """Look up actors by id, in the order given. Unknown ids are dropped."""
        by_id = {a.id: a for a in self.list_actors()}
        result: list[Actor] = []
        for actor_id in dict.fromkeys(actor_ids):
            if actor_id in by_id:
                result.append(by_id[actor_id])
        return result

    def find_actors_by_names(self, names: Iterable[str]) -> list[Actor]:
        """Resolve display names to actors, in the order the names are given."""
        by_name: dict[str, Actor] = {}
        for actor in self.list_actors():
            by_name.setdefault(actor.name, actor)
        result: list[Actor] = []
        seen: set[str] = set()
        for name in names:
            actor = by_name.get(name)
            if actor is not None and actor.id not in seen:
                seen.add(actor.id)
                result.append(actor)
        return result

    def active_actors(self, since: datetime, limit: int) -> list[Actor]:
        """Actors active at or after `since`, most recently active first."""
        actors = [a for a in self.list_actors() if a.last_active >= since]
        actors.sort(key=lambda a: a.last_active, reverse=True)
        return actors[:limit]

    def latest_active_actor(self, exclude_id: str) -> Actor | None:
        others = [a for a in self.list_actors() if a.id != exclude_id]
        if not others:
            return None
        return max(others, key=lambda a: a.last_active)

    def record_utterance(self, actor_id: str) -> Actor | None:
        """Bump an actor's last_active and message_count."""
        actor = self.get_actor(actor_id)
        if actor is None:
            return None
        actor.last_active = utcnow()
        actor.message_count += 1
        return self._upsert("actors.json", actor)

    def set_mood(self, actor_id: str, mood: str | None) -> Actor | None:
        actor = self.get_actor(actor_id)
        if actor is None:
            return None
        actor.mood = mood
        return self._upsert("actors.json", actor)

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    def create_room(self, room: Room) -> Room:
        return self._upsert("rooms.json", room)

    def get_room(self, room_id: str) -> Room | None:
        return self._get("rooms.json", Room, room_id)

    def get_room_by_name(self, name: str) -> Room | None:
        for room in self._load("rooms.json", Room):
            if room.name == name:
                return room
        return None

    def list_rooms(self, active_only: bool = True) -> list[Room]:
        rooms = self._load("rooms.json", Room)
        if active_only:
            rooms = [r for r in rooms if r.is_active]
        rooms.sort(key=lambda r: r.updated_at, reverse=True)
        return rooms

    def touch_room(self, room_id: str) -> None:
        room = self.get_room(room_id)
        if room is not None:
            room.updated_at = utcnow()
            self._upsert("rooms.json", room)

    # ------------------------------------------------------------------
    # Messages (append-only)
    # ------------------------------------------------------------------

    def _messages_file(self, room_id: str) -> Path:
        return self._messages_root / f"{room_id}.json"

    def _room_messages(self, room_id: str) -> list[Message]:
        path = self._messages_file(room_id)
        if not path.is_file():
            return []
        return [Message.model_validate(m) for m in self._read_json(path)]

    def append_message(self, message: Message) -> Message:
        existing = self._room_messages(message.room_id)
        existing.append(message)
        self._write_json(
            self._messages_file(message.room_id),
            [m.model_dump(mode="json") for m in existing],
        )
        self.touch_room(message.room_id)
        return message

    def recent_messages(self, room_id: str, limit: int) -> list[Message]:
        """The latest `limit` messages of a room, oldest first."""
        if limit <= 0:
            return []
        return self._room_messages(room_id)[-limit:]

    def list_messages(
        self, room_id: str, limit: int = 50, before: datetime | None = None
    ) -> list[Message]:
        """Page backwards through a room's history, returned oldest first."""
        messages = self._room_messages(room_id)
        if before is not None:
            messages = [m for m in messages if m.created_at < before]
        return messages[-limit:] if limit > 0 else []

    def count_messages(self, room_id: str) -> int:
        return len(self._room_messages(room_id))

    def get_messages_by_ids(self, message_ids: Iterable[str]) -> list[Message]:
        wanted = set(message_ids)
        if not wanted:
            return []
        found: list[Message] = []
        for path in self._messages_root.glob("*.json"):
            found.extend(
                m for m in (Message.model_validate(d) for d in self._read_json(path))
                if m.id in wanted
            )
        found.sort(key=lambda m: m.created_at)
        return found

    # ------------------------------------------------------------------
    # Stories
    # ------------------------------------------------------------------

    def create_story(self, story: Story) -> Story:
        return self._upsert("stories.json", story)

    def get_story(self, story_id: str) -> Story | None:
        return self._get("stories.json", Story, story_id)

    def list_stories(self, limit: int = 20, type: str | None = None) -> list[Story]:
        stories = [s for s in self._load("stories.json", Story) if s.is_published]
        if type:
            stories = [s for s in stories if s.type == type]
        stories = _hottest_first(
            stories, fire=lambda s: s.fire_count, ts=lambda s: s.published_at
        )
        return stories[:limit]

    def view_story(self, story_id: str) -> Story | None:
        story = self.get_story(story_id)
        if story is None:
            return None
        story.view_count += 1
        return self._upsert("stories.json", story)

    # ------------------------------------------------------------------
    # Gossip articles
    # ------------------------------------------------------------------

    def create_gossip(self, article: GossipArticle) -> GossipArticle:
        return self._upsert("gossip.json", article)

    def get_gossip(self, gossip_id: str) -> GossipArticle | None:
        return self._get("gossip.json", GossipArticle, gossip_id)

    def get_gossip_by_story(self, story_id: str) -> GossipArticle | None:
        for article in self._load("gossip.json", GossipArticle):
            if article.story_id == story_id:
                return article
        return None

    def list_gossip(self, page: int = 1, limit: int = 10) -> list[GossipArticle]:
        """Non-removed articles, hottest first, then newest first."""
        articles = [a for a in self._load("gossip.json", GossipArticle) if not a.removed]
        articles = _hottest_first(
            articles, fire=lambda a: a.fire_count, ts=lambda a: a.created_at
        )
        start = max(page - 1, 0) * limit
        return articles[start:start + limit]

    def count_gossip(self) -> int:
        return sum(1 for a in self._load("gossip.json", GossipArticle) if not a.removed)

    def fire_gossip(self, gossip_id: str) -> GossipArticle | None:
        article = self.get_gossip(gossip_id)
        if article is None:
            return None
        article.fire_count += 1
        return self._upsert("gossip.json", article)

    def view_gossip(self, gossip_id: str) -> GossipArticle | None:
        article = self.get_gossip(gossip_id)
        if article is None:
            return None
        article.view_count += 1
        return self._upsert("gossip.json", article)

    def remove_gossip(self, gossip_id: str) -> GossipArticle | None:
        article = self.get_gossip(gossip_id)
        if article is None:
            return None
        article.removed = True
        return self._upsert("gossip.json", article)

    # ------------------------------------------------------------------
    # Trend tags
    # ------------------------------------------------------------------

    def upsert_trend(self, tag: str, story_id: str) -> TrendTag:
        """Increment the tag's count, or create it with count 1."""
        trends = self._load("trends.json", TrendTag)
        for trend in trends:
            if trend.tag == tag:
                break
        else:
            trend = TrendTag(tag=tag)
            trends.append(trend)
        trend.count += 1
        if story_id not in trend.story_ids:
            trend.story_ids.append(story_id)
        self._dump("trends.json", trends)
        return trend

    def get_trend(self, tag: str) -> TrendTag | None:
        for trend in self._load("trends.json", TrendTag):
            if trend.tag == tag:
                return trend
        return None

    def list_trends(self, limit: int = 10) -> list[TrendTag]:
        trends = self._load("trends.json", TrendTag)
        trends.sort(key=lambda t: t.count, reverse=True)
        return trends[:limit]

    # ------------------------------------------------------------------
    # Interactions (write-only)
    # ------------------------------------------------------------------

    def record_interaction(self, interaction: Interaction) -> Interaction:
        items = self._load("interactions.json", Interaction)
        items.append(interaction)
        self._dump("interactions.json", items)
        return interaction

    def list_interactions(self) -> list[Interaction]:
        return self._load("interactions.json", Interaction)

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    def get_config(self) -> dict[str, Any]:
        """Read config, returning defaults merged with stored values."""
        config = json.loads(json.dumps(CONFIG_DEFAULTS))
        path = self._base / "config.json"
        if path.is_file():
            stored = self._read_json(path)
            for key in CONFIG_DEFAULTS:
                if key in stored:
                    config[key] = stored[key]
        return config

    def update_config(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge known fields into config and persist. Returns full config."""
        config = self.get_config()
        for key, value in fields.items():
            if key in CONFIG_DEFAULTS:
                config[key] = value
        self._write_json(self._base / "config.json", config)
        return config


def _hottest_first(items: list[M], fire, ts) -> list[M]:
    """Sort by fire count descending, breaking ties newest first."""
    return sorted(items, key=lambda item: (fire(item), ts(item) or _EPOCH), reverse=True)

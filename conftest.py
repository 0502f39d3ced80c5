"""Shared fixtures: a throwaway Storage, a stage-scripted gateway and a
fixed credential source."""

from __future__ import annotations

import pytest

from gossip_world.llm import Reply
from gossip_world.models import Actor, Human, Message, Room
from gossip_world.pipeline import build_system_prompt
from gossip_world.storage import Storage


class StubGateway:
    """Deterministic gateway stand-in for tests.

    Provide a dict mapping stage name → list of replies (in call order). A
    reply that is an Exception instance is raised instead of returned.
    Raises if a stage is called more times than replies were provided.
    """

    def __init__(self, replies: dict[str, list] | None = None) -> None:
        self._queues: dict[str, list] = {k: list(v) for k, v in (replies or {}).items()}
        self.calls: list[dict] = []

    async def __call__(
        self,
        stage: str,
        credential: str,
        prompt: str,
        *,
        system_prompt: str | None = None,
        session_id: str | None = None,
    ) -> Reply:
        self.calls.append({
            "stage": stage,
            "credential": credential,
            "prompt": prompt,
            "system_prompt": system_prompt,
        })
        queue = self._queues.get(stage)
        if not queue:
            raise AssertionError(
                f"StubGateway: unexpected call to stage={stage!r} "
                f"(no replies queued). calls so far: {self.calls}"
            )
        reply = queue.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return Reply(text=reply)

    def stages(self) -> list[str]:
        return [c["stage"] for c in self.calls]

    def assert_exhausted(self) -> None:
        """Assert every queued reply was consumed."""
        leftover = {k: v for k, v in self._queues.items() if v}
        if leftover:
            raise AssertionError(f"StubGateway: unused replies remain: {leftover}")


class StubCredentials:
    """CredentialSource with a fixed token per human and an optional shared one."""

    def __init__(
        self, tokens: dict[str, str] | None = None, shared: str | None = "shared-token"
    ) -> None:
        self._tokens = dict(tokens or {})
        self._shared = shared
        self.any_calls = 0

    async def for_human(self, human_id: str | None) -> str | None:
        if not human_id:
            return None
        return self._tokens.get(human_id)

    async def any(self) -> str | None:
        self.any_calls += 1
        return self._shared


@pytest.fixture
def storage(tmp_path) -> Storage:
    return Storage(tmp_path / "data")


@pytest.fixture
def room(storage: Storage) -> Room:
    return storage.create_room(Room(name="AI Café", topic="Everyday chit-chat"))


def make_actor(storage: Storage, name: str, human_id: str | None = None, **fields) -> Actor:
    persona = fields.pop("persona", f"{name} likes to chat")
    return storage.create_actor(Actor(
        name=name,
        human_id=human_id,
        persona=persona,
        system_prompt=build_system_prompt(persona, name),
        **fields,
    ))


def make_human(storage: Storage, name: str, **fields) -> Human:
    return storage.save_human(Human(name=name, **fields))


def add_messages(storage: Storage, room: Room, lines: list[tuple[Actor, str]]) -> list[Message]:
    return [
        storage.append_message(Message(room_id=room.id, actor_id=a.id, content=text))
        for a, text in lines
    ]

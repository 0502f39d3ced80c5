"""Generate-chat flow: one round, one mining pass, selective publishing.

The miner keeps anything at or above its own cut (0.6); only candidates at
or above the publish threshold (0.75 by default) become stories here.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field

from gossip_world.credentials import CredentialSource
from gossip_world.llm import Gateway
from gossip_world.models import StoryCandidate
from gossip_world.storage import Storage

from .miner import mine_stories
from .orchestrator import DEFAULT_PAUSE, Sleep, run_round
from .outcomes import RoundReport, Skipped
from .persona import ActorError, ensure_actor
from .publisher import publish_candidate

logger = logging.getLogger(__name__)

PUBLISH_THRESHOLD = 0.75


@dataclass
class FlowReport:
    round: RoundReport
    candidates: list[StoryCandidate] = field(default_factory=list)
    story_ids: list[str] = field(default_factory=list)
    failures: list[Skipped] = field(default_factory=list)

    @property
    def stories_created(self) -> int:
        return len(self.story_ids)


def publishable(
    candidates: list[StoryCandidate], threshold: float = PUBLISH_THRESHOLD
) -> list[StoryCandidate]:
    return [c for c in candidates if c.confidence >= threshold]


async def generate_chat(
    *,
    storage: Storage,
    gateway: Gateway,
    credentials: CredentialSource,
    room_id: str,
    human_id: str | None = None,
    topic: str | None = None,
    publish_threshold: float = PUBLISH_THRESHOLD,
    rng: random.Random | None = None,
    sleep: Sleep = asyncio.sleep,
    pause: tuple[float, float] = DEFAULT_PAUSE,
) -> FlowReport:
    """Run a round (the human's actor speaks first in line), then mine and publish."""
    priority_actor_id: str | None = None
    if human_id:
        try:
            priority_actor_id = ensure_actor(storage, human_id)
        except ActorError as e:
            logger.warning("Could not ensure actor for human %s: %s", human_id, e)

    round_report = await run_round(
        storage=storage,
        gateway=gateway,
        credentials=credentials,
        room_id=room_id,
        topic=topic,
        priority_actor_id=priority_actor_id,
        rng=rng,
        sleep=sleep,
        pause=pause,
    )
    report = FlowReport(round=round_report)

    report.candidates = await mine_stories(
        storage=storage, gateway=gateway, credentials=credentials, room_id=room_id
    )

    for candidate in publishable(report.candidates, publish_threshold):
        try:
            story_id = await publish_candidate(
                storage=storage,
                gateway=gateway,
                credentials=credentials,
                candidate=candidate,
            )
        except Exception as e:
            logger.warning("Publishing %s story failed: %s", candidate.type, e)
            report.failures.append(Skipped(str(e)))
            continue
        report.story_ids.append(story_id)

    return report

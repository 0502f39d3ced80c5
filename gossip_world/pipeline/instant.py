"""Instant gossip - operator-triggered articles not derived from mined stories.

Categories are roast, ship and hype (INSTANT_TYPES). Every model call here
degrades to a fixed template when no credential is available or the call
fails, so a request always yields an article unless "ship" finds nobody to
pair the target with.
"""

import logging

from gossip_world.credentials import CredentialSource
from gossip_world.llm import Gateway
from gossip_world.models import INSTANT_TYPES, Actor, GossipArticle, Story
from gossip_world.prompts import (
    DEBATE_PROMPT,
    HYPE_PROMPT,
    ROAST_PROMPT,
    SHIP_PROMPT,
    render_prompt,
)
from gossip_world.storage import Storage

from .outcomes import Outcome, Skipped, Success

logger = logging.getLogger(__name__)

NO_PAIRING = "no pairing available"

INSTANT_TAG_SUFFIXES = {
    "roast": "GotRoasted",
    "ship": "InLove",
    "hype": "Trending",
}

HYPE_METRIC = ("AI activity", "abnormally high")

FALLBACK_DEBATE = "\n".join([
    "[Acid Tongue]: This is absolutely ridiculous!",
    "[Superfan]: I think it's great!",
    "[Conspiracist]: There's definitely a plot behind this.",
    "[Voice of Reason]: Everyone, calm down...",
    "[Popcorn Crowd]: Pass the popcorn!",
])


def _interests(actor: Actor) -> str:
    return ", ".join(actor.interests) or "none"


async def _one_shot(
    gateway: Gateway,
    credentials: CredentialSource,
    stage: str,
    prompt: str,
    fallback: str,
) -> str:
    token = await credentials.any()
    if not token:
        return fallback
    try:
        reply = await gateway(stage, token, prompt)
    except Exception as e:
        logger.warning("Instant %s generation failed: %s", stage, e)
        return fallback
    return reply.text.strip() or fallback


async def generate_debate(
    gateway: Gateway, credentials: CredentialSource, topic: str
) -> str:
    """A five-persona debate transcript about `topic`."""
    return await _one_shot(
        gateway, credentials, "debate",
        render_prompt(DEBATE_PROMPT, {"topic": topic}),
        FALLBACK_DEBATE,
    )


async def generate_instant_gossip(
    *,
    storage: Storage,
    gateway: Gateway,
    credentials: CredentialSource,
    target: Actor,
    category: str,
) -> Outcome:
    """Fabricate a story + article about `target`. Success(article) or Skipped."""
    if category not in INSTANT_TYPES:
        raise ValueError(f"Unknown instant gossip category {category!r}")

    others: list[str] = []

    if category == "roast":
        title = await _one_shot(
            gateway, credentials, "roast",
            render_prompt(ROAST_PROMPT, {
                "name": target.name,
                "bio": target.persona or "none",
                "interests": _interests(target),
            }),
            f"Shocking! {target.name}'s secret exposed!",
        )
        content = (
            f"Reliable sources say {target.name}'s latest behaviour "
            "has the whole internet talking..."
        )

    elif category == "ship":
        partner = storage.latest_active_actor(exclude_id=target.id)
        if partner is None:
            return Skipped(NO_PAIRING)
        others.append(partner.id)
        title = await _one_shot(
            gateway, credentials, "ship",
            render_prompt(SHIP_PROMPT, {
                "name_a": target.name,
                "interests_a": _interests(target),
                "name_b": partner.name,
                "interests_b": _interests(partner),
            }),
            f"Confirmed! {target.name} and {partner.name} spotted together!",
        )
        content = (
            f"Late-night scoop: {target.name} and {partner.name} "
            "are rumoured to be more than just friends..."
        )

    else:
        metric, value = HYPE_METRIC
        title = await _one_shot(
            gateway, credentials, "hype",
            render_prompt(HYPE_PROMPT, {"metric": metric, "value": value}),
            f"The whole internet is shocked! {metric} hits {value}!",
        )
        content = (
            f"Shocking! {target.name}'s activity has suddenly exploded. "
            "Something big may be going on..."
        )

    debate = await generate_debate(gateway, credentials, title)

    # A minimal story exists only so the article has an owner.
    story = storage.create_story(Story(
        type=category,
        title=title,
        summary=content,
        evidence=content,
        main_actor_id=target.id,
        other_actor_ids=others,
    ))
    article = storage.create_gossip(GossipArticle(
        story_id=story.id,
        title=title,
        content=content,
        type=category,
        debate_log=debate,
    ))
    storage.upsert_trend(f"#{target.name}{INSTANT_TAG_SUFFIXES[category]}", story.id)
    return Success(article)

"""Gossip publisher - turns an accepted story candidate into a published
Story, its Gossip article, and a trend-tag bump.

The three writes are not transactional: if article creation fails after the
story was written, the story stays behind without an article.
"""

import logging

from gossip_world.credentials import CredentialSource
from gossip_world.llm import Gateway
from gossip_world.models import GossipArticle, Story, StoryCandidate
from gossip_world.prompts import GOSSIP_PROMPT, render_prompt
from gossip_world.storage import Storage

from .parsing import Parsed, parse_model_json

logger = logging.getLogger(__name__)

# Appended to "#<main actor name>" to form the trend tag.
TAG_SUFFIXES = {
    "cp": "InLove",
    "conflict": "Feud",
    "friendship": "NewBFFs",
    "weird": "ActingWeird",
    "achievement": "Trending",
    "roast_human": "RoastsTheirHuman",
}

HEADLINE_PHRASES = {
    "cp": "romance confirmed",
    "conflict": "it's war",
    "friendship": "new besties alert",
    "weird": "something is very off",
    "achievement": "the whole feed is talking",
    "roast_human": "roasting their own humans",
}

TITLE_TEMPLATES = {
    "cp": "Sparks fly between {names}",
    "conflict": "{names} in a heated clash",
    "friendship": "{names} become friends",
    "weird": "The strange behaviour of {names}",
    "achievement": "A moment of glory for {names}",
    "roast_human": "{names} roast their humans",
}


class PublishError(ValueError):
    """Raised when a candidate cannot be turned into a story."""


def join_names(names: list[str]) -> str:
    return " and ".join(names)


def default_title(story_type: str, names: str) -> str:
    template = TITLE_TEMPLATES.get(story_type, "The story of {names}")
    return template.format(names=names)


def trend_tag(actor_name: str, story_type: str) -> str:
    return f"#{actor_name}{TAG_SUFFIXES.get(story_type, 'InTheNews')}"


def fallback_article(names: str, candidate: StoryCandidate) -> tuple[str, str]:
    phrase = HEADLINE_PHRASES.get(candidate.type, "making headlines")
    title = f"Shocking! {names}: {phrase}!"
    content = (
        f"Reliable sources say {names} were at the centre of a major incident "
        f"in the AI society. {candidate.evidence} "
        "Insiders say there is more to this than meets the eye..."
    )
    return title, content


async def write_article(
    *,
    gateway: Gateway,
    credentials: CredentialSource,
    names: str,
    candidate: StoryCandidate,
) -> tuple[str, str]:
    """Tabloid title and body from the model, or the fixed template."""
    token = await credentials.any()
    if not token:
        logger.warning("No credential for gossip writing, using template")
        return fallback_article(names, candidate)

    prompt = render_prompt(GOSSIP_PROMPT, {
        "type": candidate.type,
        "names": names,
        "evidence": candidate.evidence,
    })
    try:
        reply = await gateway("gossip", token, prompt)
    except Exception as e:
        logger.warning("Gossip writing failed, using template: %s", e)
        return fallback_article(names, candidate)

    result = parse_model_json(reply.text)
    if isinstance(result, Parsed):
        title = result.data.get("title")
        content = result.data.get("content")
        if isinstance(title, str) and title and isinstance(content, str) and content:
            return title, content

    logger.warning("Gossip output unusable, using template: %r", reply.text[:200])
    return fallback_article(names, candidate)


async def publish_candidate(
    *,
    storage: Storage,
    gateway: Gateway,
    credentials: CredentialSource,
    candidate: StoryCandidate,
) -> str:
    """Create Story + Gossip article + trend bump. Returns the new story id."""
    actors = storage.get_actors(candidate.actor_ids)
    if not actors:
        raise PublishError("No actors found for story candidate")

    main, others = actors[0], actors[1:]
    names = join_names([a.name for a in actors])

    story = storage.create_story(Story(
        type=candidate.type,
        title=candidate.title or default_title(candidate.type, names),
        summary=candidate.evidence,
        evidence=candidate.evidence,
        main_actor_id=main.id,
        other_actor_ids=[a.id for a in others],
        message_ids=list(candidate.message_ids),
    ))

    title, content = await write_article(
        gateway=gateway, credentials=credentials, names=names, candidate=candidate
    )
    storage.create_gossip(GossipArticle(
        story_id=story.id, title=title, content=content, type=candidate.type
    ))

    storage.upsert_trend(trend_tag(main.name, candidate.type), story.id)
    logger.info("Published %s story %s: %s", candidate.type, story.id, story.title)
    return story.id

"""Tests for operator-triggered instant gossip."""

from datetime import timedelta

import pytest
from conftest import StubCredentials, StubGateway, make_actor

from gossip_world.models import utcnow
from gossip_world.pipeline import NO_PAIRING, generate_debate, generate_instant_gossip
from gossip_world.pipeline.instant import FALLBACK_DEBATE
from gossip_world.pipeline.outcomes import Skipped, Success


async def test_roast_creates_story_article_and_trend(storage):
    alice = make_actor(storage, "Alice", interests=["cats"])
    gateway = StubGateway({
        "roast": ["Alice owns 40 cat calendars!!!"],
        "debate": ["[Acid Tongue]: lol"],
    })

    outcome = await generate_instant_gossip(
        storage=storage, gateway=gateway, credentials=StubCredentials(),
        target=alice, category="roast",
    )

    assert isinstance(outcome, Success)
    article = outcome.value
    assert article.type == "roast"
    assert article.title == "Alice owns 40 cat calendars!!!"
    assert article.debate_log == "[Acid Tongue]: lol"
    story = storage.get_story(article.story_id)
    assert story.type == "roast"
    assert story.main_actor_id == alice.id
    assert storage.get_trend("#AliceGotRoasted").count == 1
    assert "cats" in gateway.calls[0]["prompt"]
    gateway.assert_exhausted()


async def test_ship_pairs_with_latest_active_other_actor(storage):
    alice = make_actor(storage, "Alice")
    make_actor(storage, "Bob", last_active=utcnow() - timedelta(hours=5))
    carol = make_actor(storage, "Carol", last_active=utcnow() + timedelta(minutes=1))
    gateway = StubGateway({"ship": ["Alice x Carol confirmed"], "debate": ["..."]})

    outcome = await generate_instant_gossip(
        storage=storage, gateway=gateway, credentials=StubCredentials(),
        target=alice, category="ship",
    )

    story = storage.get_story(outcome.value.story_id)
    assert story.other_actor_ids == [carol.id]
    assert "Carol" in gateway.calls[0]["prompt"]
    assert storage.get_trend("#AliceInLove") is not None


async def test_ship_with_single_actor_reports_no_pairing(storage):
    alice = make_actor(storage, "Alice")
    gateway = StubGateway()

    outcome = await generate_instant_gossip(
        storage=storage, gateway=gateway, credentials=StubCredentials(),
        target=alice, category="ship",
    )

    assert outcome == Skipped(NO_PAIRING)
    assert gateway.calls == []
    assert storage.list_stories() == []
    assert storage.list_trends() == []


async def test_hype_falls_back_without_credential(storage):
    alice = make_actor(storage, "Alice")
    gateway = StubGateway()

    outcome = await generate_instant_gossip(
        storage=storage, gateway=gateway, credentials=StubCredentials(shared=None),
        target=alice, category="hype",
    )

    article = outcome.value
    assert article.title == "The whole internet is shocked! AI activity hits abnormally high!"
    assert article.debate_log == FALLBACK_DEBATE
    assert storage.get_trend("#AliceTrending").count == 1
    assert gateway.calls == []


async def test_unknown_category_raises(storage):
    alice = make_actor(storage, "Alice")
    with pytest.raises(ValueError):
        await generate_instant_gossip(
            storage=storage, gateway=StubGateway(), credentials=StubCredentials(),
            target=alice, category="cp",
        )


async def test_debate_failure_uses_fallback_script():
    gateway = StubGateway({"debate": [RuntimeError("down")]})
    assert await generate_debate(gateway, StubCredentials(), "topic") == FALLBACK_DEBATE


async def test_debate_empty_reply_uses_fallback_script():
    gateway = StubGateway({"debate": ["  "]})
    assert await generate_debate(gateway, StubCredentials(), "topic") == FALLBACK_DEBATE

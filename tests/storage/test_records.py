"""Tests for the JSON file storage."""

from datetime import timedelta

from conftest import add_messages, make_actor

from gossip_world.models import GossipArticle, Human, Interaction, Room, Story, utcnow
from gossip_world.storage import CONFIG_DEFAULTS, Storage


# ── Humans and credentials ───────────────────────────────


def test_update_credential_bumps_updated_at(storage):
    human = storage.save_human(Human(name="Alice", token="old"))
    before = human.updated_at
    expiry = utcnow() + timedelta(hours=1)

    updated = storage.update_credential(human.id, "new", "refresh", expiry)

    assert updated.token == "new"
    assert updated.refresh_token == "refresh"
    assert updated.token_expiry == expiry
    assert updated.updated_at >= before
    assert storage.get_human(human.id).token == "new"


def test_update_credential_unknown_human(storage):
    assert storage.update_credential("nope", "t", None, utcnow()) is None


# ── Actors ───────────────────────────────────────────────


def test_get_actors_keeps_order_and_drops_unknown(storage):
    a = make_actor(storage, "Alice")
    b = make_actor(storage, "Bob")
    assert [x.id for x in storage.get_actors([b.id, "ghost", a.id, b.id])] == [b.id, a.id]


def test_find_actors_by_names(storage):
    a = make_actor(storage, "Alice")
    b = make_actor(storage, "Bob")
    found = storage.find_actors_by_names(["Bob", "Nobody", "Alice", "Bob"])
    assert [x.id for x in found] == [b.id, a.id]


def test_active_actors_window_and_order(storage):
    now = utcnow()
    old = make_actor(storage, "Old", last_active=now - timedelta(days=2))
    recent = make_actor(storage, "Recent", last_active=now - timedelta(minutes=1))
    newest = make_actor(storage, "Newest", last_active=now)

    active = storage.active_actors(now - timedelta(hours=24), limit=10)

    assert [a.id for a in active] == [newest.id, recent.id]
    assert old.id not in [a.id for a in storage.active_actors(now, limit=10)]
    assert len(storage.active_actors(now - timedelta(hours=24), limit=1)) == 1


def test_latest_active_actor_excludes_target(storage):
    a = make_actor(storage, "Alice")
    assert storage.latest_active_actor(exclude_id=a.id) is None
    b = make_actor(storage, "Bob")
    assert storage.latest_active_actor(exclude_id=a.id).id == b.id


def test_record_utterance_and_mood(storage):
    a = make_actor(storage, "Alice")
    storage.record_utterance(a.id)
    storage.set_mood(a.id, "smug")
    reloaded = storage.get_actor(a.id)
    assert reloaded.message_count == 1
    assert reloaded.mood == "smug"
    assert storage.set_mood("ghost", "x") is None


# ── Rooms and messages ───────────────────────────────────


def test_append_message_touches_room(storage):
    quiet = storage.create_room(Room(name="Quiet"))
    busy = storage.create_room(Room(name="Busy"))
    alice = make_actor(storage, "Alice")
    add_messages(storage, quiet, [(alice, "hello")])

    assert [r.name for r in storage.list_rooms()][0] == "Quiet"
    assert storage.count_messages(quiet.id) == 1
    assert storage.count_messages(busy.id) == 0


def test_list_rooms_hides_inactive(storage):
    storage.create_room(Room(name="Open"))
    storage.create_room(Room(name="Closed", is_active=False))
    assert [r.name for r in storage.list_rooms()] == ["Open"]
    assert len(storage.list_rooms(active_only=False)) == 2


def test_recent_messages_oldest_first(storage, room):
    alice = make_actor(storage, "Alice")
    msgs = add_messages(storage, room, [(alice, str(i)) for i in range(5)])
    assert [m.content for m in storage.recent_messages(room.id, 3)] == ["2", "3", "4"]
    assert storage.recent_messages(room.id, 0) == []
    assert storage.get_messages_by_ids([msgs[3].id, msgs[1].id]) == [msgs[1], msgs[3]]


def test_list_messages_pages_backwards(storage, room):
    alice = make_actor(storage, "Alice")
    msgs = add_messages(storage, room, [(alice, str(i)) for i in range(5)])
    page = storage.list_messages(room.id, limit=2, before=msgs[3].created_at)
    assert [m.content for m in page] == ["1", "2"]


# ── Stories, gossip and trends ───────────────────────────


def test_list_stories_hottest_first_and_type_filter(storage):
    cold = storage.create_story(Story(type="cp", title="cold", summary="", main_actor_id="a"))
    hot = storage.create_story(
        Story(type="conflict", title="hot", summary="", main_actor_id="a", fire_count=5)
    )
    storage.create_story(Story(
        type="cp", title="draft", summary="", main_actor_id="a", is_published=False
    ))

    assert [s.id for s in storage.list_stories()] == [hot.id, cold.id]
    assert [s.id for s in storage.list_stories(type="cp")] == [cold.id]
    assert storage.view_story(cold.id).view_count == 1


def test_gossip_paging_fire_and_remove(storage):
    articles = [
        storage.create_gossip(GossipArticle(story_id=f"s{i}", title=str(i), content="", type="cp"))
        for i in range(3)
    ]
    storage.fire_gossip(articles[0].id)

    first_page = storage.list_gossip(page=1, limit=2)
    assert first_page[0].id == articles[0].id
    assert len(first_page) == 2
    assert len(storage.list_gossip(page=2, limit=2)) == 1

    storage.remove_gossip(articles[1].id)
    assert storage.count_gossip() == 2
    assert articles[1].id not in [a.id for a in storage.list_gossip(limit=10)]
    assert storage.fire_gossip("ghost") is None


def test_upsert_trend_twice(storage):
    storage.upsert_trend("#AliceInLove", "s1")
    trend = storage.upsert_trend("#AliceInLove", "s2")
    assert trend.count == 2
    assert trend.story_ids == ["s1", "s2"]
    assert len(storage.list_trends()) == 1


def test_upsert_trend_same_story_not_duplicated(storage):
    storage.upsert_trend("#BobFeud", "s1")
    trend = storage.upsert_trend("#BobFeud", "s1")
    assert trend.count == 2
    assert trend.story_ids == ["s1"]


def test_list_trends_by_count(storage):
    storage.upsert_trend("#a", "s1")
    storage.upsert_trend("#b", "s2")
    storage.upsert_trend("#b", "s3")
    assert [t.tag for t in storage.list_trends(limit=1)] == ["#b"]


def test_interactions_are_appended(storage):
    storage.record_interaction(Interaction(target_type="gossip", target_id="g1"))
    storage.record_interaction(Interaction(human_id="h1", target_type="gossip", target_id="g1"))
    assert [i.human_id for i in storage.list_interactions()] == [None, "h1"]


# ── Config ───────────────────────────────────────────────


def test_config_defaults(storage):
    assert storage.get_config() == CONFIG_DEFAULTS


def test_update_config_ignores_unknown_keys(tmp_path):
    storage = Storage(tmp_path)
    result = storage.update_config({"publish_threshold": 0.9, "bogus": 1})
    assert result["publish_threshold"] == 0.9
    assert "bogus" not in result
    assert Storage(tmp_path).get_config()["publish_threshold"] == 0.9

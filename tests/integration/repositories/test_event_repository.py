"""
Integration tests for EventRepository against SQLite
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from logify.adapter.repositories.event_repository import EventRepository
from logify.domain.event import Event
from logify.domain.event_query import EventQuery
from logify.domain.object_reference import ObjectReference

NOON = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _event(event_type="Post Updated", occurred_at=NOON, **fields):
    values = dict(
        actor_id=1,
        actor_name="Site Admin",
        actor_role="administrator",
        actor_ip="203.0.113.7",
        object_type="post",
        object_subtype="post",
        object_key=42,
        object_name="Hello World",
    )
    values.update(fields)
    return Event(event_type=event_type, occurred_at=occurred_at, **values)


async def _save(repo, db_session, event):
    result = await repo.save(event)
    assert result.is_ok()
    await db_session.commit()
    return event


@pytest.fixture
def repo(db_session):
    return EventRepository(db_session)


# ----------------------------------------------------------------------------
# Save and load
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_saved_event_loads_back_with_typed_values(repo, db_session):
    event = _event()
    event.set_prop("post_title", "posts", "Hello", "Hello World")
    event.set_prop("post_author", "posts", ObjectReference(type="user", key=1))
    event.set_prop("post_modified", "posts", NOON - timedelta(days=1), NOON)
    event.set_meta("added_Category", [ObjectReference(type="term", key=5, name="News")])
    event.set_meta("network_wide", True)

    await _save(repo, db_session, event)
    loaded = await repo.load(event.id)

    assert loaded.id == event.id
    assert loaded.occurred_at == NOON
    assert loaded.object_key == 42
    assert [prop.key for prop in loaded.properties] == ["post_title", "post_author", "post_modified"]
    assert loaded.get_prop("post_title").new_value == "Hello World"
    assert loaded.get_prop_val("post_author") == ObjectReference(type="user", key=1)
    assert loaded.get_prop("post_modified").new_value == NOON
    assert loaded.get_meta_val("added_Category") == [ObjectReference(type="term", key=5, name="News")]
    assert loaded.get_meta_val("network_wide") is True


@pytest.mark.asyncio
async def test_string_keys_stay_strings(repo, db_session):
    event = await _save(repo, db_session, _event("Plugin Activated", object_type="plugin", object_key="akismet"))

    loaded = await repo.load(event.id)

    assert loaded.object_key == "akismet"


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["007", "²", "-0", "6.5"])
async def test_numeric_looking_string_keys_stay_strings(repo, db_session, key):
    event = await _save(repo, db_session, _event("Theme Switched", object_type="theme", object_key=key))

    loaded = await repo.load(event.id)

    assert loaded.object_key == key
    assert isinstance(loaded.object_key, str)


@pytest.mark.asyncio
async def test_long_text_is_cut_to_column_width(repo, db_session):
    event = _event(object_name="T" * 120, actor_agent="Mozilla/5.0 " + "x" * 400)

    await _save(repo, db_session, event)
    loaded = await repo.load(event.id)

    assert loaded.object_name == "T" * 100
    assert len(loaded.actor_agent) == 255
    assert loaded.actor_agent.startswith("Mozilla/5.0 ")


@pytest.mark.asyncio
async def test_saving_again_replaces_children(repo, db_session):
    event = _event()
    event.set_prop("post_title", "posts", "Hello", "Hello World")
    event.set_meta("note", "first")
    await _save(repo, db_session, event)
    first_id = event.id

    event.remove_prop("post_title")
    event.set_prop("post_status", "posts", "draft", "publish")
    event.set_meta("note", "second")
    await _save(repo, db_session, event)
    loaded = await repo.load(first_id)

    assert event.id == first_id
    assert await repo.count_all() == 1
    assert [prop.key for prop in loaded.properties] == ["post_status"]
    assert loaded.get_meta_val("note") == "second"


@pytest.mark.asyncio
async def test_failed_save_leaves_nothing_behind(repo, db_session):
    event = _event()
    event.set_prop("post_title", "posts", "Hello", "Hello World")

    with patch.object(EventRepository, "_save_properties", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
        result = await repo.save(event)

    assert result.is_err()
    assert result.error.code == "EVENT_SAVE_FAILED"
    assert event.is_new()
    assert await repo.count_all() == 0


@pytest.mark.asyncio
async def test_saving_a_deleted_event_fails(repo, db_session):
    event = await _save(repo, db_session, _event())
    await repo.delete(event.id)
    await db_session.commit()

    result = await repo.save(event)

    assert result.is_err()
    assert result.error.code == "EVENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_load_many_keeps_requested_order(repo, db_session):
    first = await _save(repo, db_session, _event("Post Created"))
    second = await _save(repo, db_session, _event("Post Updated"))

    events = await repo.load_many([second.id, 999, first.id])

    assert [event.id for event in events] == [second.id, first.id]


@pytest.mark.asyncio
async def test_most_recent_by_type_and_subject(repo, db_session):
    await _save(repo, db_session, _event("Image Updated", occurred_at=NOON - timedelta(minutes=10)))
    newest = await _save(repo, db_session, _event("Image Updated", occurred_at=NOON - timedelta(minutes=2)))
    await _save(repo, db_session, _event("Image Updated", object_key=43))
    await _save(repo, db_session, _event("Image Updated", actor_id=2, actor_name="Eddie Editor"))

    found = await repo.most_recent_by_type_and_subject("Image Updated", "post", 42, 1)
    missing = await repo.most_recent_by_type_and_subject("Image Deleted", "post", 42)

    assert found.id == newest.id
    assert missing is None


@pytest.mark.asyncio
async def test_delete_removes_event_and_children(repo, db_session):
    event = _event()
    event.set_prop("post_title", "posts", "Hello", "Hello World")
    await _save(repo, db_session, event)

    result = await repo.delete(event.id)
    assert result.is_ok() and result.value is True
    await db_session.commit()

    assert await repo.load(event.id) is None
    assert (await repo.delete(event.id)).value is False


# ----------------------------------------------------------------------------
# Search
# ----------------------------------------------------------------------------


@pytest_asyncio.fixture
async def logged(repo, db_session):
    """Three events a day apart: post, user, then page"""
    post = await _save(repo, db_session, _event("Post Created", occurred_at=NOON - timedelta(days=2)))
    user = await _save(
        repo,
        db_session,
        _event(
            "Failed Login",
            occurred_at=NOON - timedelta(days=1),
            actor_id=0,
            actor_name="Unknown",
            actor_role="none",
            actor_ip="198.51.100.4",
            object_type="user",
            object_subtype=None,
            object_key=None,
            object_name="User",
        ),
    )
    page = await _save(
        repo,
        db_session,
        _event(
            "Page Updated",
            actor_id=2,
            actor_name="Eddie Editor",
            actor_role="editor, author",
            object_subtype="page",
            object_key=43,
            object_name="About 100% of us",
        ),
    )
    return post, user, page


@pytest.mark.asyncio
async def test_search_counts_and_sorts_newest_first(repo, logged):
    post, user, page = logged

    filtered, ids = await repo.search(EventQuery())

    assert filtered == 3
    assert ids == [page.id, user.id, post.id]


@pytest.mark.asyncio
async def test_search_text_matches_any_column(repo, logged):
    post, user, page = logged

    assert (await repo.search(EventQuery(search="eddie")))[1] == [page.id]
    assert (await repo.search(EventQuery(search="198.51")))[1] == [user.id]
    assert (await repo.search(EventQuery(search="2024-05-30")))[1] == [post.id]


@pytest.mark.asyncio
async def test_search_text_wildcards_are_literal(repo, logged):
    post, user, page = logged

    assert (await repo.search(EventQuery(search="100%")))[1] == [page.id]
    assert (await repo.search(EventQuery(search="%")))[1] == [page.id]


@pytest.mark.asyncio
async def test_object_type_and_subtype_filters(repo, logged):
    post, user, page = logged

    assert (await repo.search(EventQuery(object_types=["user"])))[1] == [user.id]
    assert (await repo.search(EventQuery(post_type="page")))[1] == [page.id, user.id]
    assert (await repo.search(EventQuery(object_types=["post"], post_type="post")))[1] == [post.id]


@pytest.mark.asyncio
async def test_selecting_no_object_types_matches_events_without_subject(repo, db_session, logged):
    no_subject = await _save(
        repo,
        db_session,
        _event("Cron Ran", object_type=None, object_subtype=None, object_key=None, object_name=None),
    )

    filtered, ids = await repo.search(EventQuery(object_types=[]))

    assert (filtered, ids) == (1, [no_subject.id])


@pytest.mark.asyncio
async def test_date_range_includes_whole_end_day(repo, logged):
    post, user, page = logged

    filtered, ids = await repo.search(EventQuery(start_date="2024-05-31", end_date="2024-05-31"))

    assert ids == [user.id]


@pytest.mark.asyncio
async def test_actor_event_type_and_role_filters(repo, logged):
    post, user, page = logged

    assert (await repo.search(EventQuery(user_id=0)))[1] == [user.id]
    assert (await repo.search(EventQuery(event_type="Post Created")))[1] == [post.id]
    assert (await repo.search(EventQuery(role="author")))[1] == [page.id]


@pytest.mark.asyncio
async def test_paging_is_stable_for_equal_sort_values(repo, db_session):
    saved = [await _save(repo, db_session, _event("Post Updated")) for _ in range(5)]

    first_page = (await repo.search(EventQuery(sort_column="event_type", sort_direction="ASC", length=2)))[1]
    second_page = (
        await repo.search(EventQuery(sort_column="event_type", sort_direction="ASC", length=2, offset=2))
    )[1]

    assert first_page == [saved[0].id, saved[1].id]
    assert second_page == [saved[2].id, saved[3].id]


# ----------------------------------------------------------------------------
# Filter options
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_filter_options(repo, logged):
    assert await repo.distinct_event_types() == ["Failed Login", "Page Updated", "Post Created"]
    assert await repo.distinct_actors() == {1: "Site Admin", 0: "Unknown", 2: "Eddie Editor"}
    assert await repo.distinct_roles() == ["none", "administrator", "author", "editor"]
    assert await repo.distinct_subtypes("post") == ["page", "post"]
    assert await repo.date_range() == (date(2024, 5, 30), date(2024, 6, 1))


@pytest.mark.asyncio
async def test_date_range_of_empty_log(repo):
    assert await repo.date_range() == (None, None)


# ----------------------------------------------------------------------------
# Maintenance
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_older_than(repo, db_session, logged):
    post, user, page = logged

    deleted = await repo.delete_older_than(NOON - timedelta(hours=36))
    await db_session.commit()

    assert deleted == 1
    assert await repo.load(post.id) is None
    assert await repo.delete_older_than(NOON - timedelta(hours=36)) == 0


@pytest.mark.asyncio
async def test_truncate(repo, db_session, logged):
    await repo.truncate()
    await db_session.commit()

    assert await repo.count_all() == 0
    assert await repo.distinct_event_types() == []

"""
Unit tests for the Post Tracker
"""

import pytest

from logify.app.trackers import Observation
from logify.domain.object_reference import ObjectReference
from tests.fixtures.json_loader import TestDataLoader


def _saved(event_store, event_type):
    return [event for event in event_store.values() if event.event_type == event_type]


@pytest.mark.asyncio
async def test_burst_of_hooks_for_one_edit_logs_one_event(run_unit, event_store):
    before = TestDataLoader.get_copy("post")
    after = TestDataLoader.get_copy("post")
    after["post_title"] = "Hello Again"
    after["post_modified"] = "2024-05-02 09:00:00"

    await run_unit(
        Observation(name="pre_post_update", object_type="post", subject=before),
        Observation(name="post_updated", object_type="post", subject=after, prior=before),
        Observation(name="save_post", object_type="post", subject=after, args={"update": True}),
        Observation(
            name="transition_post_status",
            object_type="post",
            subject=after,
            args={"old_status": "draft", "new_status": "draft"},
        ),
    )

    assert len(event_store) == 1
    event = _saved(event_store, "Post Updated")[0]
    title = event.get_prop("post_title")
    assert (title.value, title.new_value) == ("Hello World", "Hello Again")
    assert event.object_key == 42
    assert event.object_subtype == "post"


@pytest.mark.asyncio
async def test_update_without_changes_logs_nothing(run_unit, event_store):
    post = TestDataLoader.get_copy("post")

    context = await run_unit(
        Observation(name="pre_post_update", object_type="post", subject=post),
        Observation(name="post_updated", object_type="post", subject=post, prior=post),
        Observation(name="save_post", object_type="post", subject=post, args={"update": True}),
    )

    assert event_store == {}
    assert context.get_slot("post_update:42").outcome.value == "discarded"


@pytest.mark.asyncio
async def test_meta_change_joins_the_update(run_unit, event_store):
    post = TestDataLoader.get_copy("post")

    await run_unit(
        Observation(name="pre_post_update", object_type="post", subject=post),
        Observation(
            name="update_post_meta",
            object_type="post",
            subject={"ID": 42},
            args={"meta_key": "subtitle", "meta_value": "Salutations"},
        ),
        Observation(
            name="update_post_meta",
            object_type="post",
            subject={"ID": 42},
            args={"meta_key": "_edit_lock", "meta_value": "1714560000:1"},
        ),
    )

    event = _saved(event_store, "Post Updated")[0]
    subtitle = event.get_prop("subtitle")
    assert (subtitle.source, subtitle.value, subtitle.new_value) == ("postmeta", "Greetings", "Salutations")
    assert not event.has_prop("_edit_lock")


@pytest.mark.asyncio
async def test_status_transition_is_its_own_event(run_unit, event_store):
    post = TestDataLoader.get_copy("post")

    await run_unit(
        Observation(
            name="transition_post_status",
            object_type="post",
            subject=post,
            args={"old_status": "draft", "new_status": "publish"},
        ),
    )

    event = _saved(event_store, "Post Published")[0]
    status = event.get_prop("post_status")
    assert (status.value, status.new_value) == ("draft", "publish")


@pytest.mark.asyncio
async def test_new_post_is_logged_as_created(run_unit, event_store, catalog):
    post = TestDataLoader.get_copy("post")
    post.update({"ID": 43, "post_title": "Fresh", "post_type": "page", "type_label": "Page"})
    catalog.put("post", 43, post)

    await run_unit(
        Observation(name="save_post", object_type="post", subject=post, args={"update": False}),
    )

    event = _saved(event_store, "Page Created")[0]
    assert event.object_name == "Fresh"
    assert event.object_subtype == "page"


@pytest.mark.asyncio
async def test_term_changes_are_grouped_per_taxonomy(run_unit, event_store, catalog):
    catalog.put("term", 5, TestDataLoader.get_copy("category"))
    catalog.put("term", 6, {"term_id": 6, "name": "Updates", "slug": "updates", "taxonomy": "category"})
    post = TestDataLoader.get_copy("post")

    await run_unit(
        Observation(
            name="added_term_relationship",
            object_type="post",
            subject=post,
            args={"taxonomy": "category", "term_id": 5},
        ),
        Observation(
            name="added_term_relationship",
            object_type="post",
            subject=post,
            args={"taxonomy": "category", "term_id": "6"},
        ),
        Observation(
            name="deleted_term_relationships",
            object_type="post",
            subject=post,
            args={"taxonomy": "category", "term_ids": [1]},
        ),
    )

    assert len(event_store) == 1
    event = _saved(event_store, "Post Category Updated")[0]
    assert event.get_meta_val("added_Category") == [
        ObjectReference(type="term", key=5, name="News"),
        ObjectReference(type="term", key=6, name="Updates"),
    ]
    assert event.get_meta_val("removed_Category") == [ObjectReference(type="term", key=1)]


@pytest.mark.asyncio
async def test_deleting_a_post_records_everything_and_forgets_it(run_unit, event_store, catalog):
    post = TestDataLoader.get_copy("post")

    await run_unit(
        Observation(
            name="before_delete_post",
            object_type="post",
            subject=post,
            args={"terms": {"category": [{"term_id": 5, "name": "News"}]}},
        ),
    )

    event = _saved(event_store, "Post Deleted")[0]
    assert event.object_name == "Hello World"
    assert event.get_prop_val("post_title") == "Hello World"
    assert event.get_prop_val("subtitle") == "Greetings"
    assert event.get_meta_val("Category") == [ObjectReference(type="term", key=5, name="News")]
    assert catalog.get("post", 42) is None


@pytest.mark.asyncio
async def test_edits_by_untracked_roles_are_not_logged(run_unit, event_store, editor):
    before = TestDataLoader.get_copy("post")
    after = TestDataLoader.get_copy("post")
    after["post_title"] = "Hello Again"

    await run_unit(
        Observation(name="pre_post_update", object_type="post", subject=before),
        Observation(name="post_updated", object_type="post", subject=after, prior=before),
        actor=editor,
    )

    assert event_store == {}

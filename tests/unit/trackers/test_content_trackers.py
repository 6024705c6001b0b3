"""
Unit tests for the Term, Comment and Media Trackers
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from logify.app.trackers import Observation
from logify.domain.object_reference import ObjectReference
from tests.fixtures.json_loader import TestDataLoader

COMMENT = {
    "comment_ID": "9",
    "comment_post_ID": "42",
    "comment_author": "Jo",
    "comment_author_email": "jo@example.com",
    "comment_content": "Nice post!",
    "comment_date": "2024-05-03 08:00:00",
    "comment_approved": "0",
}


def _saved(event_store, event_type):
    return [event for event in event_store.values() if event.event_type == event_type]


# ----------------------------------------------------------------------------
# Terms
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_created_term_is_named_after_its_taxonomy(run_unit, event_store):
    await run_unit(Observation(name="created_term", object_type="term", subject=TestDataLoader.get_copy("category")))

    event = _saved(event_store, "Category Created")[0]
    assert event.object_name == "News"


@pytest.mark.asyncio
async def test_term_edit_compares_against_the_term_before(run_unit, event_store):
    before = TestDataLoader.get_copy("category")
    after = TestDataLoader.get_copy("category")
    after.update({"name": "Headlines", "parent": 3})

    await run_unit(
        Observation(name="edit_terms", object_type="term", subject=before),
        Observation(name="edited_term", object_type="term", subject=after),
    )

    assert len(event_store) == 1
    event = _saved(event_store, "Category Updated")[0]
    name = event.get_prop("name")
    assert (name.source, name.value, name.new_value) == ("terms", "News", "Headlines")
    assert event.get_prop("parent").new_value == ObjectReference(type="term", key=3)
    assert not event.has_prop("slug")


@pytest.mark.asyncio
async def test_deleted_menu_is_forgotten(run_unit, event_store, catalog):
    menu = {"term_id": 8, "name": "Main", "slug": "main", "taxonomy": "nav_menu"}
    catalog.put("term", 8, menu)

    await run_unit(Observation(name="pre_delete_term", object_type="term", subject={"term_id": 8}))

    assert _saved(event_store, "Navigation Menu Deleted")[0].object_name == "Main"
    assert catalog.get("term", 8) is None


# ----------------------------------------------------------------------------
# Comments
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_new_comment_is_logged(run_unit, event_store):
    await run_unit(Observation(name="wp_insert_comment", object_type="comment", subject=dict(COMMENT)))

    event = _saved(event_store, "Comment Added")[0]
    assert event.object_name == "Nice post!"


@pytest.mark.asyncio
async def test_approving_a_comment(run_unit, event_store):
    await run_unit(
        Observation(
            name="transition_comment_status",
            object_type="comment",
            subject=dict(COMMENT),
            args={"old_status": "0", "new_status": "1"},
        ),
    )

    event = _saved(event_store, "Comment Approved")[0]
    status = event.get_prop("comment_approved")
    assert (status.value, status.new_value) == ("unapproved", "approved")


@pytest.mark.asyncio
async def test_comment_edit_shows_content_snippets(run_unit, event_store):
    after = dict(COMMENT, comment_content="<p>Really nice post!</p>")

    await run_unit(Observation(name="edit_comment", object_type="comment", subject=after, prior=dict(COMMENT)))

    content = _saved(event_store, "Comment Updated")[0].get_prop("comment_content")
    assert (content.value, content.new_value) == ("Nice post!", "Really nice post!")


# ----------------------------------------------------------------------------
# Media
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_alt_text_change_is_an_image_update(run_unit, event_store, catalog):
    catalog.put("post", 77, TestDataLoader.get_copy("image"))

    await run_unit(
        Observation(
            name="update_post_meta",
            object_type="post",
            subject={"ID": 77},
            args={"meta_key": "_wp_attachment_image_alt", "meta_value": "A sunset"},
        ),
    )

    event = _saved(event_store, "Image Updated")[0]
    assert event.get_prop("_wp_attachment_image_alt").new_value == "A sunset"


@pytest.mark.asyncio
async def test_recent_image_update_is_amended(run_unit, event_store, catalog, aggregator, admin, mock_uow, now):
    catalog.put("post", 77, TestDataLoader.get_copy("image"))
    earlier = aggregator.create_event("Image Updated", ObjectReference(type="post", key=77), actor=admin)
    earlier.occurred_at = now - timedelta(minutes=1)
    earlier.set_prop("_wp_attachment_image_alt", "postmeta", "", "A sunset")
    await aggregator.save(earlier)
    mock_uow.events.most_recent_by_type_and_subject = AsyncMock(return_value=earlier)

    await run_unit(
        Observation(
            name="update_post_meta",
            object_type="post",
            subject={"ID": 77},
            args={"meta_key": "_wp_attachment_image_alt", "meta_value": "A red sunset"},
        ),
    )

    assert list(event_store) == [earlier.id]
    alt = earlier.get_prop("_wp_attachment_image_alt")
    assert (alt.value, alt.new_value) == ("", "A red sunset")


@pytest.mark.asyncio
async def test_post_meta_on_regular_posts_is_not_a_media_event(run_unit, event_store):
    await run_unit(
        Observation(
            name="update_post_meta",
            object_type="post",
            subject={"ID": 42},
            args={"meta_key": "subtitle", "meta_value": "Greetings"},
        ),
    )

    assert event_store == {}

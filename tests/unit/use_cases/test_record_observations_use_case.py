"""
Unit tests for RecordObservationsUseCase

Tests the unit of work end to end with a mocked event repository.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from logify.app.trackers import Observation
from logify.app.use_cases.observations.dtos import ObjectSnapshot, RecordObservationsCommand
from logify.app.use_cases.observations.record_observations_use_case import RecordObservationsUseCase
from logify.domain.actor import Actor
from tests.fixtures.json_loader import TestDataLoader


@pytest.fixture
def locator():
    locator = MagicMock()
    locator.locate = AsyncMock(return_value="Sydney, New South Wales, Australia")
    return locator


@pytest.fixture
def use_case(mock_uow, event_store, catalog, locator, policy, now):
    return RecordObservationsUseCase(mock_uow, catalog, locator=locator, policy=policy, clock=lambda: now)


@pytest.mark.asyncio
async def test_request_with_many_hooks_logs_one_update(use_case, event_store, locator):
    """Test a post save that fires several hooks"""
    # Arrange
    before = TestDataLoader.get_copy("post")
    after = TestDataLoader.get_copy("post")
    after["post_title"] = "Hello Again"
    command = RecordObservationsCommand(
        actor=Actor(**TestDataLoader.get_copy("admin_actor")),
        observations=[
            Observation(name="pre_post_update", object_type="post", subject=before),
            Observation(name="post_updated", object_type="post", subject=after, prior=before),
            Observation(name="save_post", object_type="post", subject=after, args={"update": True}),
            Observation(name="wp_enqueue_scripts"),
        ],
    )

    # Act
    result = await use_case.execute(command)

    # Assert
    assert result.is_ok()
    response = result.value
    assert response.handled == 3
    assert len(response.saved) == 1
    assert response.deleted == []

    event = event_store[response.saved[0]]
    assert event.event_type == "Post Updated"
    assert event.actor_location == "Sydney, New South Wales, Australia"
    locator.locate.assert_awaited_once_with("203.0.113.7")


@pytest.mark.asyncio
async def test_location_sent_by_the_host_is_kept(use_case, event_store, locator):
    """Test the actor's location is not looked up again"""
    # Arrange
    actor = Actor(**TestDataLoader.get_copy("admin_actor"), location="Paris, France")
    command = RecordObservationsCommand(
        actor=actor,
        observations=[Observation(name="wp_login", object_type="user", subject={"ID": 1})],
    )

    # Act
    result = await use_case.execute(command)

    # Assert
    assert result.is_ok()
    assert event_store[result.value.saved[0]].actor_location == "Paris, France"
    locator.locate.assert_not_called()


@pytest.mark.asyncio
async def test_objects_are_stored_in_the_catalog_first(use_case, event_store, catalog):
    """Test observations can refer to objects sent alongside them"""
    # Arrange
    plugin = TestDataLoader.get_copy("plugin")
    command = RecordObservationsCommand(
        actor=Actor(**TestDataLoader.get_copy("admin_actor")),
        objects=[ObjectSnapshot(type="plugin", snapshot=plugin)],
        observations=[Observation(name="activated_plugin", object_type="plugin", subject={"slug": "akismet"})],
    )

    # Act
    result = await use_case.execute(command)

    # Assert
    assert result.is_ok()
    event = event_store[result.value.saved[0]]
    assert event.event_type == "Plugin Activated"
    assert event.object_name == "Akismet Anti-spam"
    assert catalog.get("plugin", "akismet")["Version"] == "5.3"


@pytest.mark.asyncio
async def test_unknown_object_type_is_rejected(use_case, mock_uow):
    """Test snapshots of unknown types fail the whole unit of work"""
    # Arrange
    command = RecordObservationsCommand(
        objects=[ObjectSnapshot(type="spaceship", snapshot={"id": 1})],
        observations=[Observation(name="wp_login", object_type="user", subject={"ID": 1})],
    )

    # Act
    result = await use_case.execute(command)

    # Assert
    assert result.is_err()
    assert result.error.code == "UNKNOWN_OBJECT_TYPE"
    mock_uow.events.save.assert_not_called()


@pytest.mark.asyncio
async def test_untracked_actor_logs_nothing(use_case, event_store):
    """Test the whole unit of work is gated for roles that are not tracked"""
    # Arrange
    before = TestDataLoader.get_copy("post")
    after = TestDataLoader.get_copy("post")
    after["post_title"] = "Hello Again"
    command = RecordObservationsCommand(
        actor=Actor(**TestDataLoader.get_copy("editor_actor")),
        observations=[
            Observation(name="pre_post_update", object_type="post", subject=before),
            Observation(name="post_updated", object_type="post", subject=after, prior=before),
        ],
    )

    # Act
    result = await use_case.execute(command)

    # Assert
    assert result.is_ok()
    assert result.value.saved == []
    assert event_store == {}

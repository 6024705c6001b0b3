"""
Unit tests for the log reading use cases

SearchEventsUseCase, GetEventDetailsUseCase and GetFilterOptionsUseCase with
a mocked event repository.
"""

import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock

from logify.app.use_cases.log.get_event_details_use_case import GetEventDetailsUseCase
from logify.app.use_cases.log.get_filter_options_use_case import GetFilterOptionsUseCase
from logify.app.use_cases.log.search_events_use_case import SearchEventsUseCase
from logify.domain.event import Event
from logify.domain.event_query import EventQuery, VALID_OBJECT_TYPES
from logify.domain.object_reference import ObjectReference


def _event(now, event_id=1, **fields):
    values = dict(
        id=event_id,
        event_type="Post Updated",
        occurred_at=now - timedelta(minutes=3),
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
    return Event(**values)


# ============================================================================
# Search
# ============================================================================


@pytest.mark.asyncio
async def test_search_returns_one_page_of_rows(mock_uow, resolvers, now):
    """Test a search maps events to table rows"""
    # Arrange
    events = [_event(now, 2), _event(now, 1, event_type="Post Created")]
    mock_uow.events.count_all = AsyncMock(return_value=10)
    mock_uow.events.search = AsyncMock(return_value=(4, [2, 1]))
    mock_uow.events.load_many = AsyncMock(return_value=events)
    query = EventQuery(draw=3, search="hello", length=2)

    use_case = SearchEventsUseCase(mock_uow, resolvers, clock=lambda: now)

    # Act
    result = await use_case.execute(query)

    # Assert
    assert result.is_ok()
    response = result.value
    assert response.draw == 3
    assert response.recordsTotal == 10
    assert response.recordsFiltered == 4
    assert [row.id for row in response.data] == [2, 1]

    row = response.data[0]
    assert row.ago == "3 minutes ago"
    assert row.occurred_at == "2024-06-01 11:57:00"
    assert row.actor.kind == "link"
    assert row.actor.text == "Site Admin"
    assert row.object.text == "Hello World"
    mock_uow.events.search.assert_awaited_once_with(query)
    mock_uow.events.load_many.assert_awaited_once_with([2, 1])


@pytest.mark.asyncio
async def test_search_shows_deleted_subjects_by_recorded_name(mock_uow, resolvers, catalog, now):
    """Test rows for subjects that no longer exist"""
    # Arrange
    catalog.remove("post", 42)
    mock_uow.events.count_all = AsyncMock(return_value=1)
    mock_uow.events.search = AsyncMock(return_value=(1, [1]))
    mock_uow.events.load_many = AsyncMock(return_value=[_event(now, event_type="Post Deleted")])

    use_case = SearchEventsUseCase(mock_uow, resolvers, clock=lambda: now)

    # Act
    result = await use_case.execute(EventQuery())

    # Assert
    row = result.value.data[0]
    assert row.object.kind == "span"
    assert row.object.text == "Hello World"
    assert row.object.deleted is True


@pytest.mark.asyncio
async def test_search_shows_anonymous_actor_as_text(mock_uow, resolvers, now):
    """Test rows for events without a logged-in actor"""
    # Arrange
    event = _event(now, event_type="Failed Login", actor_id=0, actor_name="Unknown", actor_role="none")
    mock_uow.events.count_all = AsyncMock(return_value=1)
    mock_uow.events.search = AsyncMock(return_value=(1, [1]))
    mock_uow.events.load_many = AsyncMock(return_value=[event])

    use_case = SearchEventsUseCase(mock_uow, resolvers, clock=lambda: now)

    # Act
    result = await use_case.execute(EventQuery())

    # Assert
    row = result.value.data[0]
    assert row.actor.kind == "span"
    assert row.actor.text == "Unknown"
    assert row.actor_role == "none"


# ============================================================================
# Details
# ============================================================================


@pytest.mark.asyncio
async def test_details_present_properties_and_metadata(mock_uow, resolvers, now):
    """Test stored values are turned into display values"""
    # Arrange
    event = _event(now)
    event.set_prop("post_title", "posts", "Hello", "Hello World")
    event.set_prop("post_author", "posts", ObjectReference(type="user", key=1))
    event.set_meta("added_Category", [ObjectReference(type="term", key=5, name="News")])
    mock_uow.events.load = AsyncMock(return_value=event)

    use_case = GetEventDetailsUseCase(mock_uow, resolvers, clock=lambda: now)

    # Act
    result = await use_case.execute(1)

    # Assert
    assert result.is_ok()
    details = result.value
    assert details.event_type == "Post Updated"
    assert details.actor_agent is None

    title = next(prop for prop in details.properties if prop.key == "post_title")
    assert title.label == "Post title"
    assert (title.value, title.new_value) == ("Hello", "Hello World")

    author = next(prop for prop in details.properties if prop.key == "post_author")
    assert author.value["kind"] == "link"
    assert author.value["text"] == "Site Admin"

    category = details.metadata[0]
    assert category.key == "added_Category"
    assert category.value[0]["text"] == "News"
    assert category.value[0]["deleted"] is True


@pytest.mark.asyncio
async def test_details_of_missing_event(mock_uow, resolvers, now):
    """Test an unknown id is an error"""
    # Arrange
    mock_uow.events.load = AsyncMock(return_value=None)

    use_case = GetEventDetailsUseCase(mock_uow, resolvers, clock=lambda: now)

    # Act
    result = await use_case.execute(999)

    # Assert
    assert result.is_err()
    assert result.error.code == "EVENT_NOT_FOUND"


# ============================================================================
# Filter options
# ============================================================================


@pytest.mark.asyncio
async def test_filter_options_come_from_logged_events(mock_uow):
    """Test filter choices are built from what has been logged"""
    # Arrange
    mock_uow.events.distinct_event_types = AsyncMock(return_value=["Post Created", "User Login"])
    mock_uow.events.distinct_actors = AsyncMock(return_value={1: "Site Admin", 0: "Unknown", 3: "aaron"})
    mock_uow.events.distinct_roles = AsyncMock(return_value=["none", "administrator"])
    mock_uow.events.distinct_subtypes = AsyncMock(side_effect=[["page", "post"], ["category"]])
    mock_uow.events.date_range = AsyncMock(return_value=(date(2024, 1, 2), date(2024, 6, 1)))

    use_case = GetFilterOptionsUseCase(mock_uow)

    # Act
    result = await use_case.execute()

    # Assert
    assert result.is_ok()
    options = result.value
    assert options.object_types == VALID_OBJECT_TYPES
    assert options.post_types == ["page", "post"]
    assert options.taxonomies == ["category"]
    assert [(user.id, user.name) for user in options.users] == [(0, "Unknown"), (3, "aaron"), (1, "Site Admin")]
    assert options.roles == ["none", "administrator"]
    assert (options.start_date, options.end_date) == ("2024-01-02", "2024-06-01")


@pytest.mark.asyncio
async def test_filter_options_for_an_empty_log(mock_uow):
    """Test an empty log has no date range"""
    # Arrange
    mock_uow.events.distinct_event_types = AsyncMock(return_value=[])
    mock_uow.events.distinct_actors = AsyncMock(return_value={})
    mock_uow.events.distinct_roles = AsyncMock(return_value=[])
    mock_uow.events.distinct_subtypes = AsyncMock(return_value=[])
    mock_uow.events.date_range = AsyncMock(return_value=(None, None))

    use_case = GetFilterOptionsUseCase(mock_uow)

    # Act
    result = await use_case.execute()

    # Assert
    assert result.value.users == []
    assert result.value.start_date is None

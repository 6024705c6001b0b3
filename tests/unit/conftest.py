import itertools
from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return
from logify.adapter.repositories.object_catalog import InMemoryObjectCatalog
from logify.app.resolvers import ResolverRegistry
from logify.app.services.access_control import ActorPolicy
from logify.app.services.event_aggregator import EventAggregator, ObservationContext
from logify.app.trackers import TrackerDispatcher, default_trackers
from logify.domain.actor import Actor
from tests.fixtures.json_loader import TestDataLoader


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def event_store(mock_uow):
    """
    In-memory stand-in for the event repository on mock_uow.

    Saved events are kept by id; the dict is returned for assertions.
    """
    store = {}
    ids = itertools.count(1)

    async def save(event):
        if event.id is None:
            event.id = next(ids)
        store[event.id] = event
        return Return.ok(event.id)

    async def delete(event_id):
        return Return.ok(store.pop(event_id, None) is not None)

    mock_uow.events.save = AsyncMock(side_effect=save)
    mock_uow.events.delete = AsyncMock(side_effect=delete)
    mock_uow.events.most_recent_by_type_and_subject = AsyncMock(return_value=None)
    return store


@pytest.fixture
def catalog():
    catalog = InMemoryObjectCatalog()
    catalog.put("user", 1, TestDataLoader.get_copy("admin_user"))
    catalog.put("post", 42, TestDataLoader.get_copy("post"))
    return catalog


@pytest.fixture
def resolvers(catalog):
    return ResolverRegistry(catalog)


@pytest.fixture
def policy():
    return ActorPolicy(roles_to_track=["administrator"], roles_with_access=["administrator"], track_anonymous=False)


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def aggregator(mock_uow, resolvers, policy, now):
    return EventAggregator(mock_uow, resolvers, policy, clock=lambda: now)


@pytest.fixture
def admin():
    return Actor(**TestDataLoader.get_copy("admin_actor"))


@pytest.fixture
def editor():
    return Actor(**TestDataLoader.get_copy("editor_actor"))


@pytest.fixture
def dispatcher(aggregator):
    return TrackerDispatcher(default_trackers(aggregator))


@pytest.fixture
def run_unit(aggregator, dispatcher, admin):
    """Dispatch observations as one unit of work and finalize it; returns the context."""

    async def run(*observations, actor=None):
        context = ObservationContext(actor or admin)
        for observation in observations:
            await dispatcher.dispatch(context, observation)
        await aggregator.finalize(context)
        return context

    return run

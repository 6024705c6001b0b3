from abc import ABC, abstractmethod

from logify.app.repositories.event_repository import IEventRepository
from logify.app.repositories.object_catalog import IObjectCatalog


class UnitOfWork(ABC):
    """
    Transaction boundary over the event log and object snapshot tables.

    One instance serves one request. `events` and `objects` are available
    inside `async with uow:`; leaving the block rolls back anything not
    committed.
    """

    events: IEventRepository
    objects: IObjectCatalog

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        """Commit the current transaction or raise PersistenceError"""

    @abstractmethod
    async def rollback(self):
        pass


class PersistenceError(Exception):
    """A commit or rollback failed; the transaction has been rolled back"""

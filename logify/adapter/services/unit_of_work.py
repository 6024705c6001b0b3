import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from logify.adapter.repositories.event_repository import EventRepository
from logify.adapter.repositories.object_catalog import SqlModelObjectCatalog
from logify.app.services.unit_of_work import PersistenceError, UnitOfWork

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.events = EventRepository(self.session)
        self.objects = SqlModelObjectCatalog(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed, rolling back: {e}")
            await self.session.rollback()
            raise PersistenceError(str(e)) from e

    async def rollback(self):
        await self.session.rollback()

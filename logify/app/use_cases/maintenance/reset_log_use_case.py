"""
Reset Log Use Case
"""

import logging

from libs.result import Error, Result, Return
from logify.app.services.unit_of_work import PersistenceError, UnitOfWork

from .dtos import ResetLogResponse

logger = logging.getLogger(__name__)


class ResetLogUseCase:
    """Delete every event, with its properties and metadata"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[ResetLogResponse]:
        async with self.uow:
            await self.uow.events.truncate()
            try:
                await self.uow.commit()
            except PersistenceError as e:
                logger.error(f"Failed to reset the log: {e}")
                return Return.err(Error("RESET_FAILED", "Failed to reset the log"))

        logger.warning("Log reset: all events deleted")
        return Return.ok(ResetLogResponse(status="reset"))

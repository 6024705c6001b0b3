"""
Cleanup Old Events Use Case

Deletes events older than the retention period. Meant to run daily.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from config import ApplicationConfig
from libs.result import Error, Result, Return
from logify.app.services.unit_of_work import PersistenceError, UnitOfWork
from logify.domain import datetimes
from logify.domain.entities import KeepPeriodUnit

from .dtos import CleanupOldEventsResponse

logger = logging.getLogger(__name__)


class CleanupOldEventsUseCase:
    """
    Use case for applying the retention period.

    Business Rules:
    - The period is a quantity of days, weeks, months or years
    - Months and years are converted to days on average and rounded up
    - Running it twice in a row deletes nothing the second time
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = datetimes.now_site):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, quantity: Optional[int] = None, units: Optional[str] = None
    ) -> Result[CleanupOldEventsResponse]:
        quantity = ApplicationConfig.KEEP_PERIOD_QUANTITY if quantity is None else quantity
        units = ApplicationConfig.KEEP_PERIOD_UNITS if units is None else units

        if quantity < 1:
            return Return.err(Error("INVALID_KEEP_PERIOD", f"Invalid quantity: {quantity}"))
        try:
            unit = KeepPeriodUnit(units)
        except ValueError:
            return Return.err(Error("INVALID_KEEP_PERIOD", f"Invalid unit: {units}"))
        days = datetimes.keep_period_days(quantity, unit.value)

        cutoff = self.clock() - timedelta(days=days)

        async with self.uow:
            deleted = await self.uow.events.delete_older_than(cutoff)
            try:
                await self.uow.commit()
            except PersistenceError as e:
                logger.error(f"Failed to delete old events: {e}")
                return Return.err(Error("CLEANUP_FAILED", "Failed to delete old events"))

        logger.info(f"Deleted {deleted} events older than {days} days")
        return Return.ok(
            CleanupOldEventsResponse(deleted=deleted, keep_days=days, cutoff=datetimes.format_site(cutoff))
        )

"""
Search Events Use Case

One page of the log for the given filters, sort and search text.
"""

from datetime import datetime
from typing import Callable, Optional

from libs.result import Result, Return
from logify.app.resolvers.registry import ResolverRegistry
from logify.app.services.unit_of_work import UnitOfWork
from logify.domain import datetimes
from logify.domain.event import Event
from logify.domain.event_query import EventQuery

from .dtos import EventSummary, SearchEventsResponse
from .presentation import actor_tag, object_tag, referenced_objects


class SearchEventsUseCase:
    """
    Use case for the log table.

    Business Rules:
    - recordsTotal counts every event, recordsFiltered only the matches
    - Rows come back in the query's sort order
    - Subjects that no longer exist are shown by their recorded name
    """

    def __init__(
        self,
        uow: UnitOfWork,
        resolvers: Optional[ResolverRegistry] = None,
        clock: Callable[[], datetime] = datetimes.now_site,
    ):
        self.uow = uow
        self.resolvers = resolvers
        self.clock = clock

    async def execute(self, query: EventQuery) -> Result[SearchEventsResponse]:
        async with self.uow:
            total = await self.uow.events.count_all()
            filtered, event_ids = await self.uow.events.search(query)
            events = await self.uow.events.load_many(event_ids)
            if self.resolvers is None:
                self.resolvers = ResolverRegistry(self.uow.objects)
            await self.resolvers.catalog.load(referenced_objects(events))

        now = self.clock()
        return Return.ok(
            SearchEventsResponse(
                draw=query.draw,
                recordsTotal=total,
                recordsFiltered=filtered,
                data=[self._summary(event, now) for event in events],
            )
        )

    def _summary(self, event: Event, now: datetime) -> EventSummary:
        return EventSummary(
            id=event.id,
            occurred_at=datetimes.format_site(event.occurred_at),
            ago=datetimes.get_ago_string(event.occurred_at, now),
            actor=actor_tag(event, self.resolvers),
            actor_role=event.actor_role,
            actor_ip=event.actor_ip,
            actor_location=event.actor_location,
            event_type=event.event_type,
            object=object_tag(event, self.resolvers),
            object_type=event.object_type,
        )

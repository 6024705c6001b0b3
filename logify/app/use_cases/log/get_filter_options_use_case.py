"""
Get Filter Options Use Case

Values the log can be filtered by, taken from what has actually been logged.
"""

from libs.result import Result, Return
from logify.app.services.unit_of_work import UnitOfWork
from logify.domain.event_query import VALID_OBJECT_TYPES

from .dtos import FilterOptionsResponse, UserOption


class GetFilterOptionsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[FilterOptionsResponse]:
        async with self.uow:
            event_types = await self.uow.events.distinct_event_types()
            actors = await self.uow.events.distinct_actors()
            roles = await self.uow.events.distinct_roles()
            post_types = await self.uow.events.distinct_subtypes("post")
            taxonomies = await self.uow.events.distinct_subtypes("term")
            first_date, last_date = await self.uow.events.date_range()

        users = [
            UserOption(id=actor_id, name="Unknown" if actor_id == 0 else name)
            for actor_id, name in sorted(actors.items(), key=lambda item: (item[0] != 0, (item[1] or "").lower()))
        ]

        return Return.ok(
            FilterOptionsResponse(
                object_types=list(VALID_OBJECT_TYPES),
                post_types=post_types,
                taxonomies=taxonomies,
                event_types=event_types,
                users=users,
                roles=roles,
                start_date=first_date.isoformat() if first_date else None,
                end_date=last_date.isoformat() if last_date else None,
            )
        )

"""
Get Event Details Use Case
"""

from datetime import datetime
from typing import Callable, Optional

from libs.result import Error, Result, Return
from logify.app.resolvers.registry import ResolverRegistry
from logify.app.services.unit_of_work import UnitOfWork
from logify.domain import datetimes
from logify.domain.labels import key_to_label

from .dtos import EventDetails, MetaView, PropertyView
from .presentation import actor_tag, object_tag, present_value, referenced_objects


class GetEventDetailsUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        resolvers: Optional[ResolverRegistry] = None,
        clock: Callable[[], datetime] = datetimes.now_site,
    ):
        self.uow = uow
        self.resolvers = resolvers
        self.clock = clock

    async def execute(self, event_id: int) -> Result[EventDetails]:
        async with self.uow:
            event = await self.uow.events.load(event_id)
            if self.resolvers is None:
                self.resolvers = ResolverRegistry(self.uow.objects)
            if event is not None:
                await self.resolvers.catalog.load(referenced_objects([event]))

        if event is None:
            return Return.err(Error("EVENT_NOT_FOUND", f"Event {event_id} not found"))

        properties = [
            PropertyView(
                key=prop.key,
                label=key_to_label(prop.key),
                source=prop.source,
                value=present_value(prop.value, self.resolvers),
                new_value=present_value(prop.new_value, self.resolvers),
            )
            for prop in event.properties
        ]
        metadata = [
            MetaView(key=meta.key, label=key_to_label(meta.key), value=present_value(meta.value, self.resolvers))
            for meta in event.metadata
        ]

        return Return.ok(
            EventDetails(
                id=event.id,
                occurred_at=datetimes.format_site(event.occurred_at),
                ago=datetimes.get_ago_string(event.occurred_at, self.clock()),
                actor=actor_tag(event, self.resolvers),
                actor_id=event.actor_id,
                actor_name=event.actor_name,
                actor_role=event.actor_role,
                actor_ip=event.actor_ip,
                actor_location=event.actor_location,
                actor_agent=event.actor_agent,
                event_type=event.event_type,
                object=object_tag(event, self.resolvers),
                object_type=event.object_type,
                object_subtype=event.object_subtype,
                properties=properties,
                metadata=metadata,
            )
        )

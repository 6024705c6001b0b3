"""
Value presentation for log responses.

Stored values are typed (datetimes, object references, nested lists and
dicts). Responses carry JSON: datetimes become site-local strings and object
references become display tags.
"""

from datetime import datetime
from typing import Any, Iterable, List, Optional

from logify.app.repositories.object_catalog import ObjectRef
from logify.app.resolvers.registry import ResolverRegistry
from logify.domain import datetimes
from logify.domain.event import Event
from logify.domain.object_reference import DisplayTag, ObjectReference


def present_value(value: Any, resolvers: ResolverRegistry) -> Any:
    if isinstance(value, ObjectReference):
        return resolvers.display_tag(value).model_dump()
    if isinstance(value, datetime):
        return datetimes.format_site(value)
    if isinstance(value, dict):
        return {key: present_value(item, resolvers) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [present_value(item, resolvers) for item in value]
    return value


def actor_tag(event: Event, resolvers: ResolverRegistry) -> DisplayTag:
    if not event.actor_id:
        return DisplayTag.span(event.actor_name or "Unknown")
    return resolvers.display_tag(ObjectReference(type="user", key=event.actor_id, name=event.actor_name))


def object_tag(event: Event, resolvers: ResolverRegistry) -> Optional[DisplayTag]:
    ref = event.get_object_ref()
    if ref is None:
        return None
    return resolvers.display_tag(ref)


def referenced_objects(events: Iterable[Event]) -> List[ObjectRef]:
    """(object_type, key) of every object the events' display tags look up"""
    refs: List[ObjectRef] = []

    def collect(value: Any) -> None:
        if isinstance(value, ObjectReference):
            refs.append((value.type, value.key))
        elif isinstance(value, dict):
            for item in value.values():
                collect(item)
        elif isinstance(value, (list, tuple)):
            for item in value:
                collect(item)

    for event in events:
        if event.actor_id:
            refs.append(("user", event.actor_id))
        if event.object_type:
            refs.append((event.object_type, event.object_key))
        for prop in event.properties:
            collect(prop.value)
            collect(prop.new_value)
        for meta in event.metadata:
            collect(meta.value)
    return refs

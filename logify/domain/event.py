"""
Event

One audit-log record: an action taken by an actor, optionally against a
subject object, with the subject's observed properties and extra metadata.
"""

from datetime import datetime
from typing import Any, Iterable, Optional, Union

from logify.domain.object_reference import ObjectReference
from logify.domain.property_set import EventMeta, MetadataSet, Property, PropertySet


class Event:
    def __init__(
        self,
        event_type: str,
        occurred_at: datetime,
        actor_id: int = 0,
        actor_name: str = "Unknown",
        actor_role: str = "none",
        actor_ip: Optional[str] = None,
        actor_location: Optional[str] = None,
        actor_agent: Optional[str] = None,
        object_type: Optional[str] = None,
        object_subtype: Optional[str] = None,
        object_key: Union[int, str, None] = None,
        object_name: Optional[str] = None,
        properties: Optional[PropertySet] = None,
        metadata: Optional[MetadataSet] = None,
        id: Optional[int] = None,
    ):
        self.id = id
        self.occurred_at = occurred_at
        self.actor_id = actor_id
        self.actor_name = actor_name
        self.actor_role = actor_role
        self.actor_ip = actor_ip
        self.actor_location = actor_location
        self.actor_agent = actor_agent
        self.event_type = event_type
        self.object_type = object_type
        self.object_subtype = object_subtype
        self.object_key = object_key
        self.object_name = object_name
        self.properties = properties if properties is not None else PropertySet()
        self.metadata = metadata if metadata is not None else MetadataSet()

    def is_new(self) -> bool:
        """True until the event has been saved."""
        return self.id is None

    def get_object_ref(self) -> Optional[ObjectReference]:
        if self.object_type is None:
            return None
        return ObjectReference(type=self.object_type, key=self.object_key, name=self.object_name)

    # Properties

    def set_prop(self, key: str, source: Optional[str], value: Any, new_value: Any = None) -> Property:
        return self.properties.set(key, source, value, new_value)

    def add_props(self, props: Optional[Iterable[Property]]) -> None:
        self.properties.add_all(props)

    def get_prop(self, key: str) -> Optional[Property]:
        return self.properties.get(key)

    def has_prop(self, key: str) -> bool:
        return self.properties.has(key)

    def remove_prop(self, key: str) -> None:
        self.properties.remove(key)

    def get_prop_val(self, key: str) -> Any:
        prop = self.properties.get(key)
        return prop.value if prop else None

    def has_changes(self) -> bool:
        return self.properties.has_changes()

    # Metadata

    def set_meta(self, key: str, value: Any) -> EventMeta:
        return self.metadata.set(key, value)

    def get_meta(self, key: str) -> Optional[EventMeta]:
        return self.metadata.get(key)

    def get_meta_val(self, key: str) -> Any:
        return self.metadata.get_value(key)

    def has_meta(self, key: str) -> bool:
        return self.metadata.has(key)

    def remove_meta(self, key: str) -> None:
        self.metadata.remove(key)

    def __repr__(self) -> str:
        return f"Event(id={self.id!r}, event_type={self.event_type!r}, object={self.object_type}:{self.object_key})"

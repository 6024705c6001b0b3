"""
Logify Domain Entities

Table rows and enums. Each entity in its own file.
"""

# Export all enums
from .enums import (
    KeepPeriodUnit,
    ObjectType,
    SlotOutcome,
    SlotState,
    SortDirection,
)

# Export all entities
from .event_record import EventRecord
from .event_property_record import EventPropertyRecord
from .event_meta_record import EventMetaRecord
from .object_snapshot_record import ObjectSnapshotRecord

__all__ = [
    # Enums
    "KeepPeriodUnit",
    "ObjectType",
    "SlotOutcome",
    "SlotState",
    "SortDirection",
    # Entities
    "EventRecord",
    "EventPropertyRecord",
    "EventMetaRecord",
    "ObjectSnapshotRecord",
]

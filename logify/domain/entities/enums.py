"""
Logify Domain Enums

All enumeration types used across the domain.
"""

from enum import Enum


class ObjectType(str, Enum):
    """Kinds of subject an event can be about"""

    post = "post"
    user = "user"
    term = "term"
    option = "option"
    plugin = "plugin"
    theme = "theme"
    comment = "comment"
    widget = "widget"
    core = "core"


class SlotState(str, Enum):
    """Lifecycle of an in-flight event slot within one unit of work"""

    absent = "absent"
    building = "building"
    finalized = "finalized"


class SlotOutcome(str, Enum):
    """What finalization did with a slot's event"""

    saved = "saved"
    deleted = "deleted"
    discarded = "discarded"
    failed = "failed"


class SortDirection(str, Enum):
    asc = "ASC"
    desc = "DESC"


class KeepPeriodUnit(str, Enum):
    """Retention period units"""

    day = "day"
    week = "week"
    month = "month"
    year = "year"

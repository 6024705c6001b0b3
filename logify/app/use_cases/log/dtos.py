"""
Log Use Case DTOs (Data Transfer Objects)

Response classes for reading the log.
"""

from typing import Any, List, Optional

from pydantic import BaseModel

from logify.domain.object_reference import DisplayTag


# ============================================================================
# Response DTOs
# ============================================================================


class EventSummary(BaseModel):
    """One row of the log table"""

    id: int
    occurred_at: str
    ago: str
    actor: DisplayTag
    actor_role: str
    actor_ip: Optional[str] = None
    actor_location: Optional[str] = None
    event_type: str
    object: Optional[DisplayTag] = None
    object_type: Optional[str] = None


class SearchEventsResponse(BaseModel):
    """Log search results, in the shape DataTables expects"""

    draw: int
    recordsTotal: int
    recordsFiltered: int
    data: List[EventSummary]


class PropertyView(BaseModel):
    key: str
    label: str
    source: Optional[str] = None
    value: Any = None
    new_value: Any = None


class MetaView(BaseModel):
    key: str
    label: str
    value: Any = None


class EventDetails(BaseModel):
    """Everything recorded about one event"""

    id: int
    occurred_at: str
    ago: str
    actor: DisplayTag
    actor_id: int
    actor_name: str
    actor_role: str
    actor_ip: Optional[str] = None
    actor_location: Optional[str] = None
    actor_agent: Optional[str] = None
    event_type: str
    object: Optional[DisplayTag] = None
    object_type: Optional[str] = None
    object_subtype: Optional[str] = None
    properties: List[PropertyView]
    metadata: List[MetaView]


class UserOption(BaseModel):
    id: int
    name: str


class FilterOptionsResponse(BaseModel):
    """Choices for the log page's filter controls"""

    object_types: List[str]
    post_types: List[str]
    taxonomies: List[str]
    event_types: List[str]
    users: List[UserOption]
    roles: List[str]
    start_date: Optional[str] = None
    end_date: Optional[str] = None

"""
Log Use Cases

Reading the log: search, details and filter choices.
"""

from .dtos import (
    EventDetails,
    EventSummary,
    FilterOptionsResponse,
    MetaView,
    PropertyView,
    SearchEventsResponse,
    UserOption,
)
from .get_event_details_use_case import GetEventDetailsUseCase
from .get_filter_options_use_case import GetFilterOptionsUseCase
from .search_events_use_case import SearchEventsUseCase

__all__ = [
    "SearchEventsUseCase",
    "GetEventDetailsUseCase",
    "GetFilterOptionsUseCase",
    "EventSummary",
    "SearchEventsResponse",
    "EventDetails",
    "PropertyView",
    "MetaView",
    "FilterOptionsResponse",
    "UserOption",
]

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union

from libs.result import Result
from logify.domain.event import Event
from logify.domain.event_query import EventQuery


class IEventRepository(ABC):
    """Event repository interface - application layer"""

    @abstractmethod
    async def save(self, event: Event) -> Result[int]:
        """
        Insert or update the event row, then replace its property and
        metadata rows, all in one transaction.

        On success the event's id is set and returned. On failure the whole
        write is rolled back and the event is left untouched.
        """
        pass

    @abstractmethod
    async def load(self, event_id: int) -> Optional[Event]:
        """Load an event with its properties and metadata, or None"""
        pass

    @abstractmethod
    async def delete(self, event_id: int) -> Result[bool]:
        """Delete an event and its child rows. Ok(False) if it didn't exist; Err on a database error."""
        pass

    @abstractmethod
    async def most_recent_by_type_and_subject(
        self,
        event_type: str,
        object_type: Optional[str],
        object_key: Union[int, str, None],
        actor_id: Optional[int] = None,
    ) -> Optional[Event]:
        """Newest event with this type and subject (optionally by this actor)"""
        pass

    @abstractmethod
    async def count_all(self) -> int:
        pass

    @abstractmethod
    async def search(self, query: EventQuery) -> Tuple[int, List[int]]:
        """
        Run a log query.

        Returns:
            Tuple of (filtered_count, ids of the requested page in order)
        """
        pass

    @abstractmethod
    async def load_many(self, event_ids: List[int]) -> List[Event]:
        """Load events by id, keeping the order of the ids given"""
        pass

    # Filter options

    @abstractmethod
    async def distinct_event_types(self) -> List[str]:
        pass

    @abstractmethod
    async def distinct_actors(self) -> Dict[int, str]:
        """Map of actor id -> actor name as last recorded"""
        pass

    @abstractmethod
    async def distinct_roles(self) -> List[str]:
        """Individual roles, "none" first then alphabetical"""
        pass

    @abstractmethod
    async def distinct_subtypes(self, object_type: str) -> List[str]:
        pass

    @abstractmethod
    async def date_range(self) -> Tuple[Optional[date], Optional[date]]:
        """Dates of the earliest and latest events"""
        pass

    # Maintenance

    @abstractmethod
    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete events that occurred before the cutoff. Returns the number deleted."""
        pass

    @abstractmethod
    async def truncate(self) -> None:
        """Delete every event, property and metadata row"""
        pass

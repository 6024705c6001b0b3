from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from libs.result import Result

Key = Union[int, str, None]
ObjectRef = Tuple[str, Key]


class IObjectCatalog(ABC):
    """
    Live host objects, as last reported by the host.

    Snapshots are plain dicts in the host's own field names. An object is
    live while it is in the catalog; removing it marks it deleted.

    Reads are synchronous and only see what is in the working set. Call
    load() or load_type() first for objects that may be stored elsewhere,
    and flush() to write changes back.
    """

    @abstractmethod
    def get(self, object_type: str, key: Key) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def put(self, object_type: str, key: Key, snapshot: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def remove(self, object_type: str, key: Key) -> None:
        pass

    @abstractmethod
    def all(self, object_type: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def load(self, refs: Iterable[ObjectRef]) -> None:
        """Bring the given (object_type, key) pairs into the working set"""
        pass

    @abstractmethod
    async def load_type(self, object_type: str) -> None:
        """Bring every object of a type into the working set"""
        pass

    @abstractmethod
    async def flush(self) -> Result[int]:
        """Write pending puts and removes. Ok(number of objects written)."""
        pass

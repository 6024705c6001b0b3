"""
Property Set and Metadata Set

Ordered key -> entry maps owned by an Event. Setting an existing key updates
the entry in place instead of appending a duplicate. Insertion order is the
display order.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional

from logify.domain.values import are_equal


class Property:
    """
    One observed attribute of an event's subject.

    `new_value` of None means "current value only, unchanged". This also means
    a change *to* None can't be told apart from no change (known limitation).
    """

    __slots__ = ("key", "source", "value", "new_value")

    def __init__(self, key: str, source: Optional[str] = None, value: Any = None, new_value: Any = None):
        self.key = key
        self.source = source
        self.value = value
        self.new_value = new_value

    @property
    def changed(self) -> bool:
        return self.new_value is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Property):
            return NotImplemented
        return (
            self.key == other.key
            and self.source == other.source
            and are_equal(self.value, other.value)
            and are_equal(self.new_value, other.new_value)
        )

    def __repr__(self) -> str:
        return f"Property({self.key!r}, {self.source!r}, {self.value!r}, {self.new_value!r})"


class PropertySet:
    def __init__(self, properties: Optional[Iterable[Property]] = None):
        self._items: Dict[str, Property] = {}
        for prop in properties or []:
            self.add(prop)

    def set(self, key: str, source: Optional[str], value: Any, new_value: Any = None) -> Property:
        """
        Create or update the property for `key`.

        When the property already records a change and this call records one
        too, the original value is kept and only the new value moves on, so
        draft->pending then pending->publish reads draft->publish. A change
        that ends up back at the original value collapses to "unchanged".
        """
        existing = self._items.get(key)
        if existing is None:
            prop = Property(key, source, value, new_value)
            self._items[key] = prop
            return prop

        existing.source = source
        if existing.changed and new_value is not None:
            existing.new_value = None if are_equal(existing.value, new_value) else new_value
        else:
            existing.value = value
            existing.new_value = new_value
        return existing

    def add(self, prop: Property) -> None:
        """Add a whole property, replacing any with the same key (position kept)."""
        self._items[prop.key] = prop

    def add_all(self, props: Optional[Iterable[Property]]) -> None:
        for prop in props or []:
            self.add(prop)

    def get(self, key: str) -> Optional[Property]:
        return self._items.get(key)

    def has(self, key: str) -> bool:
        return key in self._items

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def has_changes(self) -> bool:
        """True if any property has a new value (see Property for the None caveat)."""
        return any(prop.changed for prop in self._items.values())

    def __iter__(self) -> Iterator[Property]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertySet):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"PropertySet({list(self._items.values())!r})"


class EventMeta:
    """Contextual key/value attached to an event that isn't a subject property"""

    __slots__ = ("key", "value")

    def __init__(self, key: str, value: Any = None):
        self.key = key
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EventMeta):
            return NotImplemented
        return self.key == other.key and are_equal(self.value, other.value)

    def __repr__(self) -> str:
        return f"EventMeta({self.key!r}, {self.value!r})"


class MetadataSet:
    def __init__(self, entries: Optional[Iterable[EventMeta]] = None):
        self._items: Dict[str, EventMeta] = {}
        for entry in entries or []:
            self._items[entry.key] = entry

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> "MetadataSet":
        return cls(EventMeta(key, value) for key, value in (values or {}).items())

    def set(self, key: str, value: Any) -> EventMeta:
        entry = self._items.get(key)
        if entry is None:
            entry = EventMeta(key, value)
            self._items[key] = entry
        else:
            entry.value = value
        return entry

    def get(self, key: str) -> Optional[EventMeta]:
        return self._items.get(key)

    def get_value(self, key: str) -> Any:
        entry = self._items.get(key)
        return entry.value if entry else None

    def has(self, key: str) -> bool:
        return key in self._items

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def to_dict(self) -> Dict[str, Any]:
        return {key: entry.value for key, entry in self._items.items()}

    def __iter__(self) -> Iterator[EventMeta]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetadataSet):
            return NotImplemented
        return list(self) == list(other)

"""
Object Resolver

Everything the log needs to know about one kind of host object: whether an
instance still exists, its display name, its subtype, the properties worth
recording on every event about it, and how to show a reference to it.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from config import ApplicationConfig
from logify.app.repositories.object_catalog import IObjectCatalog
from logify.domain.object_reference import DisplayTag, ObjectReference
from logify.domain.property_set import Property

Key = Union[int, str, None]
Snapshot = Dict[str, Any]


def admin_url(path: str) -> str:
    return f"{ApplicationConfig.SITE_URL.rstrip('/')}/wp-admin/{path}"


class ObjectResolver(ABC):
    object_type: str = ""
    key_field: str = "ID"
    name_field: str = "name"

    def __init__(self, catalog: IObjectCatalog):
        self.catalog = catalog

    def exists(self, key: Key) -> bool:
        return self.load(key) is not None

    def load(self, key: Key) -> Optional[Snapshot]:
        if key is None:
            return None
        return self.catalog.get(self.object_type, key)

    def key_of(self, snapshot: Snapshot) -> Key:
        return snapshot.get(self.key_field)

    def catalog_key(self, snapshot: Snapshot) -> Key:
        """Key the object is stored under in the catalog"""
        return self.key_of(snapshot)

    def name_of(self, snapshot: Snapshot) -> Optional[str]:
        name = snapshot.get(self.name_field)
        return str(name) if name not in (None, "") else None

    def subtype_of(self, snapshot: Snapshot) -> Optional[str]:
        return None

    def get_name(self, key: Key) -> Optional[str]:
        snapshot = self.load(key)
        return self.name_of(snapshot) if snapshot else None

    def get_subtype(self, key: Key) -> Optional[str]:
        snapshot = self.load(key)
        return self.subtype_of(snapshot) if snapshot else None

    def get_core_properties(self, key: Key) -> Optional[List[Property]]:
        """Properties recorded on every event about this object; None if it's gone"""
        snapshot = self.load(key)
        if snapshot is None:
            return None
        return self.core_properties_of(snapshot)

    def core_properties_of(self, snapshot: Snapshot) -> List[Property]:
        return []

    def fallback_name(self, key: Key) -> str:
        label = self.object_type.capitalize()
        return f"{label} {key}" if key not in (None, "") else label

    @abstractmethod
    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        """Admin URL for a live object, or None if it has no admin page"""
        pass

    def get_tag(self, key: Key, old_name: Optional[str] = None) -> DisplayTag:
        snapshot = self.load(key)
        if snapshot is None:
            return DisplayTag.span(old_name or self.fallback_name(key), deleted=True)

        name = self.name_of(snapshot) or old_name or self.fallback_name(key)
        href = self.edit_url(key, snapshot)
        if href:
            return DisplayTag.link(href, name)
        return DisplayTag.span(name)

    def reference(self, snapshot: Snapshot) -> ObjectReference:
        return ObjectReference(type=self.object_type, key=self.key_of(snapshot), name=self.name_of(snapshot))

from typing import List, Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.object_reference import DisplayTag
from logify.domain.property_set import Property, PropertySet

CORE_NAME = "WordPress"
CORE_CATALOG_KEY = "core"


class CoreResolver(ObjectResolver):
    """The site software itself: one object that always exists and is never loaded"""

    object_type = "core"
    name_field = "name"

    def exists(self, key: Key) -> bool:
        return True

    def load(self, key: Key) -> Optional[Snapshot]:
        return None

    def key_of(self, snapshot: Snapshot) -> Key:
        return None

    def catalog_key(self, snapshot: Snapshot) -> Key:
        return CORE_CATALOG_KEY

    def name_of(self, snapshot: Snapshot) -> Optional[str]:
        return CORE_NAME

    def get_name(self, key: Key) -> Optional[str]:
        return CORE_NAME

    def get_core_properties(self, key: Key) -> Optional[List[Property]]:
        # The host reports the running version under a fixed key
        snapshot = self.catalog.get(self.object_type, CORE_CATALOG_KEY)
        if not snapshot or not snapshot.get("version"):
            return []
        props = PropertySet()
        props.set("version", None, snapshot["version"])
        return list(props)

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        return admin_url("update-core.php")

    def get_tag(self, key: Key, old_name: Optional[str] = None) -> DisplayTag:
        return DisplayTag.link(self.edit_url(key, {}), CORE_NAME)

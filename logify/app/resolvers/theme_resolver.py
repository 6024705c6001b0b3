from typing import List, Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.property_set import Property, PropertySet

THEMES = "themes"


class ThemeResolver(ObjectResolver):
    """Themes are keyed by stylesheet (directory name)"""

    object_type = "theme"
    key_field = "stylesheet"
    name_field = "Name"

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        return admin_url(f"themes.php?theme={key}")

    def core_properties_of(self, snapshot: Snapshot) -> List[Property]:
        props = PropertySet()
        for key in ("Name", "Version", "Author", "ThemeURI"):
            if snapshot.get(key) not in (None, ""):
                props.set(key, THEMES, snapshot[key])
        return list(props)

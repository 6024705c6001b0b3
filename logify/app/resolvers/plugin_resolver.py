from typing import List, Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.property_set import Property, PropertySet

PLUGINS = "plugins"


class PluginResolver(ObjectResolver):
    """Plugins are keyed by slug, e.g. 'akismet/akismet.php'"""

    object_type = "plugin"
    key_field = "slug"
    name_field = "Name"

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        return admin_url("plugins.php")

    def core_properties_of(self, snapshot: Snapshot) -> List[Property]:
        props = PropertySet()
        for key in ("Name", "Version", "Author", "PluginURI"):
            if snapshot.get(key) not in (None, ""):
                props.set(key, PLUGINS, snapshot[key])
        return list(props)

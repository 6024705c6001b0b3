from typing import Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.labels import key_to_label


class WidgetResolver(ObjectResolver):
    """Widgets are keyed by widget id, e.g. 'block-3'"""

    object_type = "widget"
    key_field = "id"
    name_field = "title"

    def name_of(self, snapshot: Snapshot) -> Optional[str]:
        title = snapshot.get("title")
        if title:
            return str(title)
        id_base = str(snapshot.get("id") or "").rsplit("-", 1)[0]
        return key_to_label(id_base, ucwords=True) or None

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        return admin_url("widgets.php")

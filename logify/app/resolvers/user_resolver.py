from typing import List, Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.property_set import Property, PropertySet
from logify.domain.values import normalize

USERS = "users"
USERMETA = "usermeta"

# Never recorded as properties
PRIVATE_FIELDS = ("user_pass", "user_activation_key", "session_tokens")


def get_properties(snapshot: Snapshot) -> List[Property]:
    """Every field and meta value of the user, minus secrets"""
    props = PropertySet()
    for key, value in snapshot.items():
        if key in PRIVATE_FIELDS or key in ("meta", "roles"):
            continue
        props.set(key, USERS, normalize(key, value))
    for key, value in (snapshot.get("meta") or {}).items():
        if key in PRIVATE_FIELDS:
            continue
        props.set(key, USERMETA, normalize(key, value))
    return list(props)


class UserResolver(ObjectResolver):
    object_type = "user"
    key_field = "ID"
    name_field = "display_name"

    def name_of(self, snapshot: Snapshot) -> Optional[str]:
        return snapshot.get("display_name") or snapshot.get("user_login") or None

    def fallback_name(self, key: Key) -> str:
        if not key:
            return "Unknown"
        return f"User {key}"

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        return admin_url(f"user-edit.php?user_id={key}")

    def core_properties_of(self, snapshot: Snapshot) -> List[Property]:
        props = PropertySet()
        props.set("ID", USERS, normalize("ID", snapshot.get("ID")))
        props.set("user_login", USERS, snapshot.get("user_login"))
        props.set("user_email", USERS, snapshot.get("user_email"))
        props.set("display_name", USERS, snapshot.get("display_name"))
        props.set("user_registered", USERS, normalize("user_registered", snapshot.get("user_registered")))
        return list(props)

from typing import List, Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.labels import key_to_label
from logify.domain.property_set import Property, PropertySet
from logify.domain.values import normalize

TERMS = "terms"
TERM_TAXONOMY = "term_taxonomy"


def taxonomy_label(snapshot: Snapshot) -> str:
    """Singular name of the term's taxonomy, e.g. 'Category'"""
    label = snapshot.get("taxonomy_label")
    if label:
        return str(label)
    taxonomy = snapshot.get("taxonomy") or "term"
    if taxonomy == "post_tag":
        return "Tag"
    return key_to_label(taxonomy, ucwords=True)


class TermResolver(ObjectResolver):
    object_type = "term"
    key_field = "term_id"
    name_field = "name"

    def subtype_of(self, snapshot: Snapshot) -> Optional[str]:
        return snapshot.get("taxonomy")

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        if snapshot.get("taxonomy") == "nav_menu":
            return admin_url(f"nav-menus.php?action=edit&menu={key}")
        return admin_url(f"term.php?taxonomy={snapshot.get('taxonomy')}&tag_ID={key}")

    def core_properties_of(self, snapshot: Snapshot) -> List[Property]:
        props = PropertySet()
        props.set("term_id", TERMS, normalize("term_id", snapshot.get("term_id")))
        props.set("name", TERMS, snapshot.get("name"))
        props.set("slug", TERMS, snapshot.get("slug"))
        props.set("taxonomy", TERM_TAXONOMY, snapshot.get("taxonomy"))
        if snapshot.get("description"):
            props.set("description", TERM_TAXONOMY, snapshot.get("description"))
        return list(props)

from typing import List, Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.labels import get_snippet, key_to_label
from logify.domain.object_reference import ObjectReference
from logify.domain.property_set import Property, PropertySet
from logify.domain.values import are_equal, normalize

POSTS = "posts"
POSTMETA = "postmeta"

# Columns of the posts table whose dates are unreliable on revisions
POST_DATE_FIELDS = ("post_date", "post_date_gmt", "post_modified", "post_modified_gmt")

CORE_PROPERTIES = {
    "link": "Link",
    "ID": "ID",
    "post_type": "Post Type",
    "post_author": "Post Author",
    "post_status": "Post Status",
    "post_date": "Post Date",
    "post_modified": "Post Modified",
    "post_content": "Post Content",
    "post_excerpt": "Post Excerpt",
    "_wp_attachment_image_alt": "Alternative Text",
}

IGNORED_META_KEYS = ("_edit_lock", "_edit_last")


def is_core_property(key: str) -> bool:
    return key in CORE_PROPERTIES


def post_type_label(snapshot: Snapshot) -> str:
    """Singular name of the post's type, e.g. 'Page'"""
    label = snapshot.get("type_label")
    if label:
        return str(label)
    return key_to_label(snapshot.get("post_type") or "post", ucwords=True)


def media_type(snapshot: Snapshot) -> Optional[str]:
    """'image', 'video', 'audio' or 'file' for attachments, None for anything else"""
    if snapshot.get("post_type") != "attachment":
        return None
    mime = str(snapshot.get("post_mime_type") or "")
    major = mime.split("/")[0]
    return major if major in ("image", "video", "audio") else "file"


def status_transition_verb(old_status: str, new_status: str) -> str:
    if old_status == "trash":
        return "Restored"
    return {
        "publish": "Published",
        "draft": "Drafted",
        "pending": "Pending",
        "private": "Privatized",
        "trash": "Trashed",
        "auto-draft": "Auto-drafted",
        "inherit": "Inherited",
        "future": "Scheduled",
        "request-pending": "Request Pending",
        "request-confirmed": "Request Confirmed",
        "request-failed": "Request Failed",
        "request-completed": "Request Completed",
    }.get(new_status, "Status Changed")


def get_changes(before: Snapshot, after: Snapshot) -> List[Property]:
    """Changed fields and meta between two snapshots of the same post"""
    props = PropertySet()

    for key, value in before.items():
        if key in POST_DATE_FIELDS or key in ("meta", "type_label"):
            continue
        val = normalize(key, value)
        new_val = normalize(key, after.get(key))
        if not are_equal(val, new_val):
            props.set(key, POSTS, val, new_val)

    meta_before = before.get("meta") or {}
    meta_after = after.get("meta") or {}
    for key in list(meta_before) + [k for k in meta_after if k not in meta_before]:
        if key in IGNORED_META_KEYS:
            continue
        val = normalize(key, meta_before.get(key))
        new_val = normalize(key, meta_after.get(key))
        if not are_equal(val, new_val):
            props.set(key, POSTMETA, val, new_val)

    return list(props)


def get_properties(snapshot: Snapshot) -> List[Property]:
    """Every field and meta value of the post, kept for the record on deletion"""
    props = PropertySet()
    for key, value in snapshot.items():
        if key in POST_DATE_FIELDS or key in ("meta", "type_label"):
            continue
        props.set(key, POSTS, normalize(key, value))
    for key, value in (snapshot.get("meta") or {}).items():
        props.set(key, POSTMETA, normalize(key, value))
    return list(props)


class PostResolver(ObjectResolver):
    object_type = "post"
    key_field = "ID"
    name_field = "post_title"

    def subtype_of(self, snapshot: Snapshot) -> Optional[str]:
        return snapshot.get("post_type")

    def fallback_name(self, key: Key) -> str:
        return f"Post {key}"

    def name_of(self, snapshot: Snapshot) -> Optional[str]:
        title = snapshot.get("post_title")
        if title:
            return str(title)
        return f"{post_type_label(snapshot)} {snapshot.get('ID')}"

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        if snapshot.get("post_type") == "revision":
            return admin_url(f"revision.php?revision={key}")
        if snapshot.get("post_status") == "trash":
            return admin_url(f"edit.php?post_status=trash&post_type={snapshot.get('post_type') or 'post'}")
        return admin_url(f"post.php?post={key}&action=edit")

    def core_properties_of(self, snapshot: Snapshot) -> List[Property]:
        props = PropertySet()
        props.set("link", None, self.reference(snapshot))
        props.set("ID", POSTS, normalize("ID", snapshot.get("ID")))
        props.set("post_type", POSTS, snapshot.get("post_type"))

        author = normalize("post_author", snapshot.get("post_author"))
        props.set("post_author", POSTS, ObjectReference(type="user", key=author) if author else None)

        props.set("post_status", POSTS, snapshot.get("post_status"))
        props.set("post_date", POSTS, normalize("post_date", snapshot.get("post_date")))
        props.set("post_modified", POSTS, normalize("post_modified", snapshot.get("post_modified")))

        if snapshot.get("post_content"):
            props.set("post_content", POSTS, get_snippet(snapshot["post_content"], 100))
        if snapshot.get("post_excerpt"):
            props.set("post_excerpt", POSTS, get_snippet(snapshot["post_excerpt"], 100))

        if media_type(snapshot) == "image":
            alt_text = (snapshot.get("meta") or {}).get("_wp_attachment_image_alt")
            props.set("_wp_attachment_image_alt", POSTMETA, alt_text)

        return list(props)

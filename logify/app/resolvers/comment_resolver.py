from typing import List, Optional

from logify.app.resolvers.base import Key, ObjectResolver, Snapshot, admin_url
from logify.domain.labels import get_snippet
from logify.domain.object_reference import ObjectReference
from logify.domain.property_set import Property, PropertySet
from logify.domain.values import normalize

COMMENTS = "comments"

APPROVAL_VERBS = {
    "approved": "Approved",
    "unapproved": "Pending",
    "spam": "Marked as Spam",
    "trash": "Trashed",
}


def approval_status(value) -> str:
    """Map comment_approved ('1', '0', 'spam', 'trash') to a status name"""
    value = str(value)
    if value in ("1", "approve", "approved"):
        return "approved"
    if value in ("0", "hold", "unapproved"):
        return "unapproved"
    return value


class CommentResolver(ObjectResolver):
    object_type = "comment"
    key_field = "comment_ID"
    name_field = "comment_content"

    def name_of(self, snapshot: Snapshot) -> Optional[str]:
        content = get_snippet(snapshot.get("comment_content"), 50)
        return content or None

    def fallback_name(self, key: Key) -> str:
        return f"Comment {key}"

    def edit_url(self, key: Key, snapshot: Snapshot) -> Optional[str]:
        return admin_url(f"comment.php?action=editcomment&c={key}")

    def core_properties_of(self, snapshot: Snapshot) -> List[Property]:
        props = PropertySet()
        props.set("comment_ID", COMMENTS, normalize("comment_ID", snapshot.get("comment_ID")))
        props.set("comment_author", COMMENTS, snapshot.get("comment_author"))

        post_id = normalize("comment_post_ID", snapshot.get("comment_post_ID"))
        if post_id:
            props.set("comment_post_ID", COMMENTS, ObjectReference(type="post", key=post_id))

        props.set("comment_date", COMMENTS, normalize("comment_date", snapshot.get("comment_date")))
        props.set("comment_content", COMMENTS, get_snippet(snapshot.get("comment_content"), 100))
        if "comment_approved" in snapshot:
            props.set("comment_approved", COMMENTS, approval_status(snapshot["comment_approved"]))
        return list(props)

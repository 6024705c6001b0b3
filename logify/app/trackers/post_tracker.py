"""
Post Tracker

Posts, pages and custom post types (attachments are left to the media
tracker). Edits made within one request fold into a single Created/Updated
event; status transitions, term changes and deletions are logged on their own.
"""

import logging
from typing import Any, Dict, Optional

from logify.app.resolvers.post_resolver import (
    IGNORED_META_KEYS,
    POSTMETA,
    POSTS,
    get_changes,
    get_properties,
    post_type_label,
    status_transition_verb,
)
from logify.app.resolvers.term_resolver import taxonomy_label
from logify.app.services.event_aggregator import EventSlot, ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain import datetimes
from logify.domain.event import Event
from logify.domain.labels import get_snippet
from logify.domain.object_reference import ObjectReference
from logify.domain.values import are_equal, normalize

logger = logging.getLogger(__name__)

NAV_MENU_ITEM = "nav_menu_item"


def is_revision(post: Dict[str, Any]) -> bool:
    return post.get("post_type") == "revision"


class PostTracker(Tracker):
    observations = {
        "pre_post_update": "on_pre_post_update",
        "post_updated": "on_post_updated",
        "save_post": "on_save_post",
        "update_post_meta": "on_update_post_meta",
        "transition_post_status": "on_transition_post_status",
        "added_term_relationship": "on_added_term_relationship",
        "deleted_term_relationships": "on_deleted_term_relationships",
        "before_delete_post": "on_before_delete_post",
    }

    async def get_update_post_event(
        self, context: ObservationContext, observation: Observation, post: Dict[str, Any], verb: str
    ) -> Optional[Event]:
        """The Created/Updated event for this post, started on first use"""
        post_id = normalize("ID", post.get("ID"))
        return await self.aggregator.begin(
            context,
            f"post_update:{post_id}",
            f"{post_type_label(post)} {verb}",
            self.reference("post", post),
            actor=self.actor_for(context, observation),
        )

    async def on_pre_post_update(self, context: ObservationContext, observation: Observation) -> None:
        """Record the last modified datetime before the post changes."""
        post = observation.subject
        if not post or post.get("post_type") in ("attachment", NAV_MENU_ITEM) or is_revision(post):
            return

        event = await self.get_update_post_event(context, observation, post, "Updated")
        if event is None:
            return
        event.set_prop("post_modified", POSTS, normalize("post_modified", post.get("post_modified")))

    async def on_post_updated(self, context: ObservationContext, observation: Observation) -> None:
        post_after, post_before = observation.subject, observation.prior
        if not post_after or not post_before:
            return
        if post_after.get("post_type") in ("attachment", NAV_MENU_ITEM) or is_revision(post_after):
            return

        changes = [prop for prop in get_changes(post_before, post_after) if prop.key != "post_status"]
        if not changes:
            return

        event = await self.get_update_post_event(context, observation, post_after, "Updated")
        if event is None:
            return

        for prop in changes:
            if prop.key == "post_content":
                # Keep snippets rather than whole documents
                prop.value = get_snippet(prop.value)
                prop.new_value = get_snippet(prop.new_value)
            event.set_prop(prop.key, prop.source, prop.value, prop.new_value)

    async def on_save_post(self, context: ObservationContext, observation: Observation) -> None:
        post = observation.subject
        if not post or post.get("post_type") in ("attachment", NAV_MENU_ITEM):
            return

        if is_revision(post):
            # A new revision means the parent post was updated; link the content change to it.
            parent = self.resolvers.catalog.get("post", post.get("post_parent"))
            if not parent:
                return
            event = await self.get_update_post_event(context, observation, parent, "Updated")
            if event is None:
                return
            prop = event.get_prop("post_content")
            if prop is not None:
                prop.new_value = ObjectReference(type="post", key=normalize("ID", post.get("ID")), name="Compare revisions")
            return

        if observation.arg("update", False):
            return

        verb = "Created"
        event = await self.get_update_post_event(context, observation, post, verb)
        if event is None:
            return
        event.event_type = f"{post_type_label(post)} {verb}"
        slot = context.get_slot(f"post_update:{normalize('ID', post.get('ID'))}")
        slot.creating = True

    async def on_update_post_meta(self, context: ObservationContext, observation: Observation) -> None:
        post = self.current("post", observation.subject)
        meta_key = observation.arg("meta_key")
        if not post or not meta_key or meta_key in IGNORED_META_KEYS:
            return
        if post.get("post_type") == "attachment":
            return

        current = (observation.prior or post).get("meta") or {}
        val = normalize(meta_key, current.get(meta_key))
        new_val = normalize(meta_key, observation.arg("meta_value"))
        if are_equal(val, new_val):
            return

        event = await self.get_update_post_event(context, observation, post, "Updated")
        if event is None:
            return
        event.set_prop(meta_key, POSTMETA, val, new_val)

    async def on_transition_post_status(self, context: ObservationContext, observation: Observation) -> None:
        """Status changes are logged separately so publishing and review stand out."""
        post = observation.subject
        old_status = observation.arg("old_status")
        new_status = observation.arg("new_status")
        if not post or post.get("post_type") in ("attachment", NAV_MENU_ITEM) or is_revision(post):
            return
        if old_status == new_status or new_status in ("auto-draft", "inherit"):
            return

        event_type = f"{post_type_label(post)} {status_transition_verb(old_status, new_status)}"
        event = self.aggregator.create_event(
            event_type, self.reference("post", post), actor=self.actor_for(context, observation)
        )
        if event is None:
            return

        event.set_prop("post_status", POSTS, old_status, new_status)
        if new_status == "future":
            event.set_meta("when_to_publish", datetimes.create_datetime(post.get("post_date")))
        await self.aggregator.save(event, context)

    async def on_added_term_relationship(self, context: ObservationContext, observation: Observation) -> None:
        await self._record_terms(context, observation, "added", [observation.arg("term_id")])

    async def on_deleted_term_relationships(self, context: ObservationContext, observation: Observation) -> None:
        await self._record_terms(context, observation, "removed", observation.arg("term_ids") or [])

    async def _record_terms(self, context: ObservationContext, observation: Observation, change: str, term_ids) -> None:
        """One '<Type> <Taxonomy> Updated' event per post and taxonomy, listing added and removed terms."""
        post = observation.subject
        taxonomy = observation.arg("taxonomy")
        if not post or not taxonomy or is_revision(post):
            return

        post_id = normalize("ID", post.get("ID"))
        taxonomy_name = observation.arg("taxonomy_label") or self._taxonomy_name(taxonomy)
        if post.get("post_type") == NAV_MENU_ITEM:
            event_type = "Navigation Menu Item Added"
        else:
            event_type = f"{post_type_label(post)} {taxonomy_name} Updated"

        slot_name = f"post_terms:{post_id}:{taxonomy}"
        event = await self.aggregator.begin(
            context,
            slot_name,
            event_type,
            self.reference("post", post),
            actor=self.actor_for(context, observation),
            creating=True,
            before_save=self._set_term_meta,
        )
        if event is None:
            return

        slot = context.get_slot(slot_name)
        slot.data.setdefault("taxonomy", taxonomy)
        slot.data.setdefault("taxonomy_name", taxonomy_name)
        slot.data.setdefault("nav_menu_item", post.get("post_type") == NAV_MENU_ITEM)
        changes = slot.data.setdefault("terms", {"added": [], "removed": []})
        for term_id in term_ids:
            term_id = normalize("term_id", term_id)
            if term_id is not None and term_id not in changes[change]:
                changes[change].append(term_id)

    def _set_term_meta(self, slot: EventSlot) -> None:
        event = slot.event
        taxonomy = slot.data["taxonomy"]
        taxonomy_name = slot.data["taxonomy_name"]
        added = [self._term_ref(term_id) for term_id in slot.data["terms"]["added"]]
        removed = [self._term_ref(term_id) for term_id in slot.data["terms"]["removed"]]

        if added:
            if slot.data["nav_menu_item"] and taxonomy == "nav_menu":
                event.set_meta("navigation_menu", added[0])
            else:
                event.set_meta(f"added_{taxonomy_name}", added)
        if removed:
            event.set_meta(f"removed_{taxonomy_name}", removed)

    def _term_ref(self, term_id) -> ObjectReference:
        return self.resolvers.complete(ObjectReference(type="term", key=term_id))

    def _taxonomy_name(self, taxonomy: str) -> str:
        for term in self.resolvers.catalog.all("term"):
            if term.get("taxonomy") == taxonomy:
                return taxonomy_label(term)
        return taxonomy_label({"taxonomy": taxonomy})

    async def on_before_delete_post(self, context: ObservationContext, observation: Observation) -> None:
        post = observation.subject
        if not post or post.get("post_type") == "attachment" or is_revision(post):
            return

        if post.get("post_type") == NAV_MENU_ITEM:
            event_type = "Navigation Menu Item Removed"
        else:
            event_type = f"{post_type_label(post)} Deleted"

        event = self.aggregator.create_event(
            event_type, self.reference("post", post), actor=self.actor_for(context, observation)
        )
        if event is not None:
            # Attached terms, one metadata entry per taxonomy
            for taxonomy, terms in (observation.arg("terms") or {}).items():
                refs = [
                    ObjectReference(type="term", key=normalize("term_id", term.get("term_id")), name=term.get("name"))
                    for term in terms
                ]
                if not refs:
                    continue
                if post.get("post_type") == NAV_MENU_ITEM and taxonomy == "nav_menu":
                    event.set_meta("navigation_menu", refs[0])
                else:
                    event.set_meta(self._taxonomy_name(taxonomy), refs)

            # Keep everything about the post in case it needs restoring
            if post.get("post_type") != NAV_MENU_ITEM:
                event.add_props(get_properties(post))

            await self.aggregator.save(event, context)

        self.forget("post", post.get("ID"))

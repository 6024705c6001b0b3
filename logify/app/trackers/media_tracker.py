"""
Media Tracker

Attachments. Uploading or editing a file fires many hooks over several
requests, so an 'Updated' event made by the same user for the same file within
the last few minutes is reopened and amended instead of adding another.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from config import ApplicationConfig
from logify.app.resolvers.post_resolver import (
    IGNORED_META_KEYS,
    POSTMETA,
    get_changes,
    get_properties,
    is_core_property,
    media_type,
)
from logify.app.services.event_aggregator import EventSlot, ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.property_set import Property
from logify.domain.values import are_equal, normalize

logger = logging.getLogger(__name__)


def media_label(post: Dict[str, Any]) -> str:
    return (media_type(post) or "file").capitalize()


class MediaTracker(Tracker):
    observations = {
        "add_attachment": "on_add_attachment",
        "attachment_updated": "on_attachment_updated",
        "update_post_meta": "on_update_post_meta",
        "delete_attachment": "on_delete_attachment",
    }

    def _attachment(self, observation: Observation) -> Optional[Dict[str, Any]]:
        post = self.current("post", observation.subject)
        if not post:
            return None
        return post if media_type(post) else None

    async def get_update_media_slot(
        self, context: ObservationContext, observation: Observation, post: Dict[str, Any]
    ) -> Optional[EventSlot]:
        post_id = normalize("ID", post.get("ID"))
        slot_name = f"media_update:{post_id}"
        event = await self.aggregator.begin(
            context,
            slot_name,
            f"{media_label(post)} Updated",
            self.reference("post", post),
            actor=self.actor_for(context, observation),
            reuse_window=timedelta(minutes=ApplicationConfig.MEDIA_REUSE_MINUTES),
        )
        if event is None:
            return None
        return context.get_slot(slot_name)

    async def on_add_attachment(self, context: ObservationContext, observation: Observation) -> None:
        post = self._attachment(observation)
        if not post:
            return

        slot = await self.get_update_media_slot(context, observation, post)
        if slot is None:
            return

        slot.event.event_type = f"{media_label(post)} Added"
        slot.creating = True

        # Values recorded before we knew this was an upload are initial values, not changes
        for prop in slot.event.properties:
            if not prop.value and prop.new_value is not None:
                prop.value = prop.new_value
                prop.new_value = None

    async def on_update_post_meta(self, context: ObservationContext, observation: Observation) -> None:
        meta_key = observation.arg("meta_key")
        if not meta_key or meta_key in IGNORED_META_KEYS:
            return
        post = self._attachment(observation)
        if not post:
            return

        slot = await self.get_update_media_slot(context, observation, post)
        if slot is None:
            return
        event = slot.event

        new_val = normalize(meta_key, observation.arg("meta_value"))
        if slot.creating:
            event.set_prop(meta_key, POSTMETA, new_val)
            return

        prop = event.get_prop(meta_key)
        if prop is not None:
            val = prop.value
        else:
            current = (observation.prior or post).get("meta") or {}
            val = normalize(meta_key, current.get(meta_key))

        if not are_equal(val, new_val):
            if prop is not None:
                prop.new_value = new_val
            else:
                event.set_prop(meta_key, POSTMETA, val, new_val)
        elif prop is not None:
            # Changed back: nothing to show anymore
            event.remove_prop(meta_key)

    async def on_attachment_updated(self, context: ObservationContext, observation: Observation) -> None:
        post_after, post_before = observation.subject, observation.prior
        if not post_after or not post_before or not media_type(post_after):
            return

        changes = get_changes(post_before, post_after)
        if not changes:
            logger.debug("No changed properties found")
            return

        slot = await self.get_update_media_slot(context, observation, post_after)
        if slot is None:
            return
        event = slot.event

        if not slot.reusing:
            event.add_props(changes)
            return

        # Amending an earlier event: compare against the value it started from
        for change in changes:
            existing = event.get_prop(change.key)
            val = existing.value if existing else change.value
            if not are_equal(val, change.new_value):
                event.properties.add(Property(change.key, change.source, val, change.new_value))
            elif is_core_property(change.key):
                event.properties.add(Property(change.key, change.source, val))
            else:
                event.remove_prop(change.key)

    async def on_delete_attachment(self, context: ObservationContext, observation: Observation) -> None:
        post = self._attachment(observation)
        if not post:
            return

        event = self.aggregator.create_event(
            f"{media_label(post)} Deleted", self.reference("post", post), actor=self.actor_for(context, observation)
        )
        if event is not None:
            event.add_props(get_properties(post))
            await self.aggregator.save(event, context)

        self.forget("post", post.get("ID"))

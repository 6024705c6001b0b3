"""
Comment Tracker
"""

import logging

from logify.app.resolvers.comment_resolver import APPROVAL_VERBS, COMMENTS, approval_status
from logify.app.services.event_aggregator import ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.labels import get_snippet
from logify.domain.values import are_equal, normalize

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "comment_author",
    "comment_author_email",
    "comment_author_url",
    "comment_content",
    "comment_date",
)


class CommentTracker(Tracker):
    observations = {
        "wp_insert_comment": "on_wp_insert_comment",
        "edit_comment": "on_edit_comment",
        "transition_comment_status": "on_transition_comment_status",
        "delete_comment": "on_delete_comment",
    }

    async def on_wp_insert_comment(self, context: ObservationContext, observation: Observation) -> None:
        comment = self.current("comment", observation.subject)
        if not comment:
            return
        await self.aggregator.log_event(
            context, "Comment Added", self.reference("comment", comment), actor=self.actor_for(context, observation)
        )

    async def on_edit_comment(self, context: ObservationContext, observation: Observation) -> None:
        comment_after, comment_before = observation.subject, observation.prior
        if not comment_after or not comment_before:
            return

        comment_id = normalize("comment_ID", comment_after.get("comment_ID"))
        for key in EDITABLE_FIELDS:
            val = normalize(key, comment_before.get(key))
            new_val = normalize(key, comment_after.get(key))
            if are_equal(val, new_val):
                continue

            event = await self.aggregator.begin(
                context,
                f"comment_update:{comment_id}",
                "Comment Updated",
                self.reference("comment", comment_after),
                actor=self.actor_for(context, observation),
            )
            if event is None:
                return
            if key == "comment_content":
                val, new_val = get_snippet(val), get_snippet(new_val)
            event.set_prop(key, COMMENTS, val, new_val)

    async def on_transition_comment_status(self, context: ObservationContext, observation: Observation) -> None:
        comment = self.current("comment", observation.subject)
        new_status = approval_status(observation.arg("new_status"))
        old_status = approval_status(observation.arg("old_status"))
        if not comment or new_status == "delete" or new_status == old_status:
            return

        verb = "Restored" if old_status == "trash" else APPROVAL_VERBS.get(new_status, "Status Changed")
        event = self.aggregator.create_event(
            f"Comment {verb}", self.reference("comment", comment), actor=self.actor_for(context, observation)
        )
        if event is None:
            return
        event.set_prop("comment_approved", COMMENTS, old_status, new_status)
        await self.aggregator.save(event, context)

    async def on_delete_comment(self, context: ObservationContext, observation: Observation) -> None:
        comment = self.current("comment", observation.subject)
        if not comment:
            return
        await self.aggregator.log_event(
            context, "Comment Deleted", self.reference("comment", comment), actor=self.actor_for(context, observation)
        )
        self.forget("comment", comment.get("comment_ID"))

"""
Term Tracker

Categories, tags, navigation menus and custom taxonomy terms.
"""

import logging
from typing import Any, Dict

from logify.app.resolvers.term_resolver import TERM_TAXONOMY, TERMS, taxonomy_label
from logify.app.services.event_aggregator import ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.object_reference import ObjectReference
from logify.domain.values import are_equal, normalize

logger = logging.getLogger(__name__)

# Fields compared on edit, and the table each lives in
TERM_FIELDS = {
    "name": TERMS,
    "slug": TERMS,
    "description": TERM_TAXONOMY,
    "parent": TERM_TAXONOMY,
}


def term_label(term: Dict[str, Any]) -> str:
    if term.get("taxonomy") == "nav_menu":
        return "Navigation Menu"
    return taxonomy_label(term)


class TermTracker(Tracker):
    observations = {
        "created_term": "on_created_term",
        "edit_terms": "on_edit_terms",
        "edited_term": "on_edited_term",
        "pre_delete_term": "on_pre_delete_term",
    }

    async def on_created_term(self, context: ObservationContext, observation: Observation) -> None:
        term = self.current("term", observation.subject)
        if not term:
            return
        await self.aggregator.log_event(
            context, f"{term_label(term)} Created", self.reference("term", term), actor=self.actor_for(context, observation)
        )

    async def on_edit_terms(self, context: ObservationContext, observation: Observation) -> None:
        """Fires before the edit: remember the term as it was."""
        term = observation.subject
        if not term:
            return
        term_id = normalize("term_id", term.get("term_id"))
        context.state.setdefault("terms_before", {})[term_id] = dict(term)

    async def on_edited_term(self, context: ObservationContext, observation: Observation) -> None:
        term_after = observation.subject
        if not term_after:
            return
        term_id = normalize("term_id", term_after.get("term_id"))
        term_before = observation.prior or context.state.get("terms_before", {}).get(term_id)
        if not term_before:
            return

        event = None
        for key, source in TERM_FIELDS.items():
            if key not in term_after:
                continue
            val = normalize(key, term_before.get(key))
            new_val = normalize(key, term_after.get(key))
            if are_equal(val, new_val):
                continue

            if event is None:
                event = await self.aggregator.begin(
                    context,
                    f"term_update:{term_id}",
                    f"{term_label(term_after)} Updated",
                    self.reference("term", term_after),
                    actor=self.actor_for(context, observation),
                )
                if event is None:
                    return

            if key == "parent":
                val = ObjectReference(type="term", key=val) if val else None
                new_val = ObjectReference(type="term", key=new_val) if new_val else None
            event.set_prop(key, source, val, new_val)

    async def on_pre_delete_term(self, context: ObservationContext, observation: Observation) -> None:
        term = self.current("term", observation.subject)
        if not term:
            return
        await self.aggregator.log_event(
            context, f"{term_label(term)} Deleted", self.reference("term", term), actor=self.actor_for(context, observation)
        )
        self.forget("term", term.get("term_id"))

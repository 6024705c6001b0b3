"""
Widget Tracker

Saving a widget form sends the whole settings array; only the settings that
actually changed are recorded.
"""

import logging

from logify.app.services.event_aggregator import ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.values import diff, normalize, reduce_changes

logger = logging.getLogger(__name__)

WIDGETS = "widgets"


class WidgetTracker(Tracker):
    observations = {
        "update_widget": "on_update_widget",
        "delete_widget": "on_delete_widget",
    }

    async def on_update_widget(self, context: ObservationContext, observation: Observation) -> None:
        widget = self.current("widget", observation.subject)
        if not widget:
            return

        old_settings = (observation.prior or {}).get("settings") or {}
        new_settings = widget.get("settings") or {}
        if not diff(old_settings, new_settings):
            logger.debug(f"Widget {widget.get('id')} saved without changes")
            return

        old_reduced, new_reduced = reduce_changes(old_settings, new_settings)
        event = self.aggregator.create_event(
            "Widget Updated",
            self.reference("widget", widget),
            actor=self.actor_for(context, observation),
        )
        if event is None:
            return

        for key in list(old_reduced.keys()) + [k for k in new_reduced.keys() if k not in old_reduced]:
            event.set_prop(key, WIDGETS, normalize(key, old_reduced.get(key)), normalize(key, new_reduced.get(key)))
        if observation.arg("sidebar"):
            event.set_meta("sidebar", observation.arg("sidebar"))
        await self.aggregator.save(event, context)

    async def on_delete_widget(self, context: ObservationContext, observation: Observation) -> None:
        widget = self.current("widget", observation.subject)
        if not widget:
            return
        metadata = {"sidebar": observation.arg("sidebar")} if observation.arg("sidebar") else None
        await self.aggregator.log_event(
            context,
            "Widget Deleted",
            self.reference("widget", widget),
            metadata=metadata,
            actor=self.actor_for(context, observation),
        )
        self.forget("widget", widget.get("id"))

"""
Option Tracker

All settings changed in one request are logged as one 'Settings Updated'
event, named after the settings that changed.
"""

import logging
from typing import Any

from config import ApplicationConfig
from logify.app.resolvers.option_resolver import OPTIONS, is_setting, option_label
from logify.app.services.event_aggregator import EventSlot, ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.labels import join_limited
from logify.domain.object_reference import ObjectReference
from logify.domain.values import are_equal, normalize

logger = logging.getLogger(__name__)

SETTINGS_SLOT = "settings"

TRUE_STRINGS = ("1", "true", "yes", "on")


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


class OptionTracker(Tracker):
    observations = {
        "update_option": "on_update_option",
    }

    async def on_update_option(self, context: ObservationContext, observation: Observation) -> None:
        option_name = observation.arg("option_name")
        if not option_name or not is_setting(option_name):
            return

        old_value = observation.arg("old_value")
        new_value = observation.arg("new_value")
        if observation.arg("type") == "boolean":
            val, new_val = to_bool(old_value), to_bool(new_value)
        else:
            val, new_val = normalize(option_name, old_value), normalize(option_name, new_value)

        if are_equal(val, new_val):
            return

        event = await self.aggregator.begin(
            context,
            SETTINGS_SLOT,
            "Settings Updated",
            ObjectReference(type="option"),
            actor=self.actor_for(context, observation),
            before_save=self._name_event,
        )
        if event is None:
            return

        if option_name.endswith("_category"):
            val = ObjectReference(type="term", key=val) if val is not None else None
            new_val = ObjectReference(type="term", key=new_val) if new_val is not None else None
        elif option_name == "wp_page_for_privacy_policy":
            val = ObjectReference(type="post", key=val) if val is not None else None
            new_val = ObjectReference(type="post", key=new_val) if new_val is not None else None

        event.set_prop(option_name, OPTIONS, val, new_val)

    def _name_event(self, slot: EventSlot) -> None:
        names = [option_label(prop.key) for prop in slot.event.properties]
        if names:
            slot.event.object_name = join_limited(names, ApplicationConfig.MAX_OBJECT_NAME_LENGTH)

"""
Core Tracker
"""

import logging

from logify.app.resolvers.core_resolver import CORE_CATALOG_KEY
from logify.app.services.event_aggregator import ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.labels import version_change_verb
from logify.domain.object_reference import ObjectReference
from logify.domain.property_set import Property

logger = logging.getLogger(__name__)


class CoreTracker(Tracker):
    observations = {
        "core_updated": "on_core_updated",
    }

    async def on_core_updated(self, context: ObservationContext, observation: Observation) -> None:
        new_version = observation.arg("new_version")
        if not new_version:
            return
        running = self.resolvers.catalog.get("core", CORE_CATALOG_KEY) or {}
        old_version = observation.arg("old_version") or running.get("version")

        verb = version_change_verb(old_version, new_version)
        await self.aggregator.log_event(
            context,
            f"Core {verb}",
            ObjectReference(type="core", key=new_version),
            properties=[Property("version", None, old_version, new_version)],
            actor=self.actor_for(context, observation),
        )
        self.resolvers.catalog.put("core", CORE_CATALOG_KEY, {"version": new_version})

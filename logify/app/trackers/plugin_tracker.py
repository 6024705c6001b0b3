"""
Plugin Tracker
"""

import logging
from typing import List, Optional

from logify.app.resolvers.plugin_resolver import PLUGINS
from logify.app.services.event_aggregator import ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.labels import version_change_verb
from logify.domain.property_set import Property

logger = logging.getLogger(__name__)


def version_props(old_version: Optional[str], new_version: Optional[str]) -> List[Property]:
    if old_version and new_version and old_version != new_version:
        return [Property("Version", PLUGINS, old_version, new_version)]
    return []


class PluginTracker(Tracker):
    observations = {
        "activated_plugin": "on_activated_plugin",
        "deactivated_plugin": "on_deactivated_plugin",
        "plugin_installed": "on_plugin_installed",
        "plugin_updated": "on_plugin_updated",
        "deleted_plugin": "on_deleted_plugin",
    }

    async def _log(
        self, context: ObservationContext, observation: Observation, verb: str, properties: Optional[List[Property]] = None
    ) -> None:
        plugin = self.current("plugin", observation.subject)
        if not plugin:
            return
        metadata = {}
        if observation.arg("network_wide") is not None:
            metadata["network_wide"] = bool(observation.arg("network_wide"))
        await self.aggregator.log_event(
            context,
            f"Plugin {verb}",
            self.reference("plugin", plugin),
            metadata=metadata,
            properties=properties,
            actor=self.actor_for(context, observation),
        )

    async def on_activated_plugin(self, context: ObservationContext, observation: Observation) -> None:
        await self._log(context, observation, "Activated")

    async def on_deactivated_plugin(self, context: ObservationContext, observation: Observation) -> None:
        await self._log(context, observation, "Deactivated")

    async def on_plugin_installed(self, context: ObservationContext, observation: Observation) -> None:
        """A fresh install, or an upload replacing an installed version."""
        old_version = observation.arg("old_version")
        new_version = observation.arg("new_version")
        verb = version_change_verb(old_version, new_version) if old_version else "Installed"
        await self._log(context, observation, verb, version_props(old_version, new_version))

    async def on_plugin_updated(self, context: ObservationContext, observation: Observation) -> None:
        old_version = observation.arg("old_version")
        new_version = observation.arg("new_version")
        await self._log(context, observation, "Upgraded", version_props(old_version, new_version))

    async def on_deleted_plugin(self, context: ObservationContext, observation: Observation) -> None:
        await self._log(context, observation, "Deleted")
        if observation.subject:
            self.forget("plugin", observation.subject.get("slug"))

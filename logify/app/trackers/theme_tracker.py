"""
Theme Tracker
"""

import logging
from typing import List, Optional

from logify.app.resolvers.theme_resolver import THEMES
from logify.app.services.event_aggregator import ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.labels import version_change_verb
from logify.domain.property_set import Property

logger = logging.getLogger(__name__)


def version_props(old_version: Optional[str], new_version: Optional[str]) -> List[Property]:
    if old_version and new_version and old_version != new_version:
        return [Property("Version", THEMES, old_version, new_version)]
    return []


class ThemeTracker(Tracker):
    observations = {
        "switch_theme": "on_switch_theme",
        "theme_installed": "on_theme_installed",
        "theme_updated": "on_theme_updated",
        "deleted_theme": "on_deleted_theme",
    }

    async def on_switch_theme(self, context: ObservationContext, observation: Observation) -> None:
        new_theme = self.current("theme", observation.subject)
        if not new_theme:
            return
        metadata = {}
        old_theme = self.current("theme", observation.prior)
        if old_theme:
            metadata["old_theme"] = self.reference("theme", old_theme)
        await self.aggregator.log_event(
            context,
            "Theme Switched",
            self.reference("theme", new_theme),
            metadata=metadata,
            actor=self.actor_for(context, observation),
        )

    async def on_theme_installed(self, context: ObservationContext, observation: Observation) -> None:
        """Installing over an existing copy is logged as an upgrade, downgrade or re-install."""
        theme = self.current("theme", observation.subject)
        if not theme:
            return
        old_version = observation.arg("old_version")
        new_version = observation.arg("new_version") or theme.get("Version")
        verb = version_change_verb(old_version, new_version) if old_version else "Installed"
        await self.aggregator.log_event(
            context,
            f"Theme {verb}",
            self.reference("theme", theme),
            properties=version_props(old_version, new_version),
            actor=self.actor_for(context, observation),
        )

    async def on_theme_updated(self, context: ObservationContext, observation: Observation) -> None:
        theme = self.current("theme", observation.subject)
        if not theme:
            return
        old_version = observation.arg("old_version")
        new_version = observation.arg("new_version") or theme.get("Version")
        verb = version_change_verb(old_version, new_version) if old_version else "Upgraded"
        await self.aggregator.log_event(
            context,
            f"Theme {verb}",
            self.reference("theme", theme),
            properties=version_props(old_version, new_version),
            actor=self.actor_for(context, observation),
        )

    async def on_deleted_theme(self, context: ObservationContext, observation: Observation) -> None:
        theme = self.current("theme", observation.subject)
        if not theme:
            return
        await self.aggregator.log_event(
            context, "Theme Deleted", self.reference("theme", theme), actor=self.actor_for(context, observation)
        )
        self.forget("theme", theme.get("stylesheet"))

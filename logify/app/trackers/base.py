"""
Trackers

A tracker turns host observations (one per hook that fired) into calls on the
Event Aggregator. Each tracker lists the observation names it handles; the
dispatcher calls every tracker registered for a name, in registration order.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from logify.app.services.event_aggregator import EventAggregator, ObservationContext
from logify.domain.actor import Actor
from logify.domain.object_reference import ObjectReference

logger = logging.getLogger(__name__)


class Observation(BaseModel):
    """One hook notification from the host"""

    name: str
    object_type: Optional[str] = None
    # The object as it is now (after the change, if any)
    subject: Optional[Dict[str, Any]] = None
    # The object before the change, for hooks that provide it
    prior: Optional[Dict[str, Any]] = None
    args: Dict[str, Any] = Field(default_factory=dict)
    # Set when the hook ran on behalf of someone other than the request's user
    actor: Optional[Actor] = None

    def arg(self, key: str, default: Any = None) -> Any:
        return self.args.get(key, default)


class Tracker:
    # Observation name -> handler method name
    observations: Dict[str, str] = {}

    def __init__(self, aggregator: EventAggregator):
        self.aggregator = aggregator
        self.resolvers = aggregator.resolvers

    async def handle(self, context: ObservationContext, observation: Observation) -> None:
        method_name = self.observations.get(observation.name)
        if method_name is None:
            return
        await getattr(self, method_name)(context, observation)

    def actor_for(self, context: ObservationContext, observation: Observation) -> Actor:
        return observation.actor or context.actor

    def reference(self, object_type: str, snapshot: Optional[Dict[str, Any]]) -> Optional[ObjectReference]:
        if not snapshot:
            return None
        return self.resolvers.reference_from_snapshot(object_type, snapshot)

    def current(self, object_type: str, snapshot: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Full snapshot of an object, for hooks that only carry its key"""
        if not snapshot:
            return snapshot
        resolver = self.resolvers.get(object_type)
        if resolver is None:
            return snapshot
        return self.resolvers.catalog.get(object_type, resolver.key_of(snapshot)) or snapshot

    def forget(self, object_type: str, key: Any) -> None:
        """Mark an object as deleted in the catalog"""
        self.resolvers.catalog.remove(object_type, key)


class TrackerDispatcher:
    def __init__(self, trackers: Iterable[Tracker]):
        self.trackers: List[Tracker] = list(trackers)
        self._routes: Dict[str, List[Tracker]] = {}
        for tracker in self.trackers:
            for name in tracker.observations:
                self._routes.setdefault(name, []).append(tracker)

    def handles(self, name: str) -> bool:
        return name in self._routes

    async def dispatch(self, context: ObservationContext, observation: Observation) -> int:
        """Run every handler for the observation. Returns how many ran."""
        trackers = self._routes.get(observation.name, [])
        if not trackers:
            logger.debug(f"No tracker handles {observation.name!r}")
        for tracker in trackers:
            await tracker.handle(context, observation)
        return len(trackers)

"""
Record Observations Use Case

Runs one unit of work: the host's observations for a single request are fed
to the trackers in order, then every in-flight event is finalized.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from libs.result import Error, Result, Return
from logify.app.repositories.object_catalog import IObjectCatalog, ObjectRef
from logify.app.resolvers.core_resolver import CORE_CATALOG_KEY
from logify.app.resolvers.registry import ResolverRegistry
from logify.app.services.access_control import ActorPolicy
from logify.app.services.event_aggregator import EventAggregator, ObservationContext
from logify.app.services.location import LocationResolver
from logify.app.services.unit_of_work import PersistenceError, UnitOfWork
from logify.app.trackers import Observation, TrackerDispatcher, default_trackers
from logify.domain import datetimes
from logify.domain.actor import Actor

from .dtos import RecordObservationsCommand, RecordObservationsResponse

logger = logging.getLogger(__name__)

# Observation args that carry the key of another object
KEY_ARGS = {
    "term_id": "term",
    "reassign": "user",
    "option_name": "option",
}
KEY_LIST_ARGS = {
    "term_ids": "term",
}


class RecordObservationsUseCase:
    """
    Use case for recording what happened during one host request.

    Business Rules:
    - The actor's location is looked up once per unit of work
    - Object snapshots are stored in the catalog before observations run
    - Each observation's subject is stored in the catalog just before it runs
    - Observations are handled in the order given
    - Events are finalized once, after the last observation
    - Catalog changes are written with the unit of work, so they outlive the process
    """

    def __init__(
        self,
        uow: UnitOfWork,
        catalog: Optional[IObjectCatalog] = None,
        locator: Optional[LocationResolver] = None,
        policy: Optional[ActorPolicy] = None,
        clock: Callable[[], datetime] = datetimes.now_site,
    ):
        self.uow = uow
        self.catalog = catalog
        self.locator = locator
        self.policy = policy
        self.clock = clock

    async def execute(self, command: RecordObservationsCommand) -> Result[RecordObservationsResponse]:
        actor = command.actor
        if actor.location is None and self.locator is not None:
            location = await self.locator.locate(actor.ip)
            actor = actor.model_copy(update={"location": location})

        async with self.uow:
            catalog = self.catalog if self.catalog is not None else self.uow.objects
            resolvers = ResolverRegistry(catalog)
            for item in command.objects:
                if resolvers.get(item.type) is None:
                    return Return.err(Error("UNKNOWN_OBJECT_TYPE", f"Unknown object type: {item.type}"))

            await catalog.load(self._referenced(resolvers, command, actor))
            if any(observation.arg("taxonomy") or observation.arg("terms") for observation in command.observations):
                await catalog.load_type("term")

            for item in command.objects:
                self._remember(resolvers, item.type, item.snapshot)

            aggregator = EventAggregator(self.uow, resolvers, self.policy, self.clock)
            dispatcher = TrackerDispatcher(default_trackers(aggregator))
            context = ObservationContext(actor)

            handled = 0
            for observation in command.observations:
                if observation.object_type and observation.subject:
                    self._remember(resolvers, observation.object_type, observation.subject)
                handled += await self._dispatch(dispatcher, context, observation)
            await self._save_catalog(catalog)

            summary = await aggregator.finalize(context)
            await self._save_catalog(catalog)

        logger.info(
            f"Unit of work for actor {actor.id}: {handled} handlers ran, "
            f"{len(context.saved_event_ids)} saved, {len(context.deleted_event_ids)} deleted"
        )
        return Return.ok(
            RecordObservationsResponse(
                handled=handled,
                saved=context.saved_event_ids,
                deleted=context.deleted_event_ids,
                discarded=summary.discarded,
                failed=summary.failed,
            )
        )

    async def _dispatch(self, dispatcher: TrackerDispatcher, context: ObservationContext, observation: Observation) -> int:
        if not dispatcher.handles(observation.name):
            logger.debug(f"Ignoring observation {observation.name!r}")
            return 0
        return await dispatcher.dispatch(context, observation)

    def _remember(self, resolvers: ResolverRegistry, object_type: str, snapshot) -> None:
        resolver = resolvers.get(object_type)
        if resolver is None:
            return
        key = resolver.catalog_key(snapshot)
        if key is not None:
            resolvers.catalog.put(object_type, key, snapshot)

    def _referenced(self, resolvers: ResolverRegistry, command: RecordObservationsCommand, actor: Actor) -> List[ObjectRef]:
        """Every stored object the trackers may look up while handling the command"""
        refs: List[ObjectRef] = [("core", CORE_CATALOG_KEY), ("user", actor.id)]

        for item in command.objects:
            refs.append((item.type, resolvers.get(item.type).catalog_key(item.snapshot)))

        for observation in command.observations:
            if observation.actor is not None:
                refs.append(("user", observation.actor.id))
            resolver = resolvers.get(observation.object_type)
            for snapshot in (observation.subject, observation.prior):
                if not snapshot:
                    continue
                if resolver is not None:
                    refs.append((observation.object_type, resolver.catalog_key(snapshot)))
                if snapshot.get("post_parent"):
                    refs.append(("post", snapshot["post_parent"]))
            for arg, object_type in KEY_ARGS.items():
                if observation.arg(arg) is not None:
                    refs.append((object_type, observation.arg(arg)))
            for arg, object_type in KEY_LIST_ARGS.items():
                refs.extend((object_type, key) for key in observation.arg(arg) or [])

        return refs

    async def _save_catalog(self, catalog: IObjectCatalog) -> None:
        result = await catalog.flush()
        if result.is_err():
            logger.error(f"Object snapshots not saved: {result.error.message}")
            return
        if not result.value:
            return
        try:
            await self.uow.commit()
        except PersistenceError as e:
            logger.error(f"Failed to commit object snapshots: {e}")

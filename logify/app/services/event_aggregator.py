"""
Event Aggregator

Builds events while a unit of work (one host request) runs, and decides at
the end whether each one is saved, deleted or dropped.

Trackers open named slots on an ObservationContext. Every observation that
touches the same slot amends the same in-flight Event, so a burst of hooks
for one edit produces one log entry. finalize() then saves events that were
created or that carry changes, deletes persisted events that no longer carry
any, and discards the rest.
"""

import inspect
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Union

from pydantic import BaseModel, Field

from config import ApplicationConfig
from logify.app.resolvers.registry import ResolverRegistry
from logify.app.services.access_control import ActorPolicy
from logify.app.services.unit_of_work import PersistenceError, UnitOfWork
from logify.domain import datetimes
from logify.domain.actor import Actor
from logify.domain.entities.enums import SlotOutcome, SlotState
from logify.domain.event import Event
from logify.domain.object_reference import ObjectReference
from logify.domain.property_set import MetadataSet, Property

logger = logging.getLogger(__name__)

Subject = Union[ObjectReference, str, None]
BeforeSave = Callable[["EventSlot"], Any]


class SlotStateError(Exception):
    """A slot was opened or amended after its unit of work was finalized"""
    pass


class EventSlot:
    def __init__(
        self,
        name: str,
        event: Event,
        creating: bool = False,
        before_save: Optional[BeforeSave] = None,
        reusing: bool = False,
    ):
        self.name = name
        self.event = event
        self.creating = creating
        self.before_save = before_save
        self.reusing = reusing
        self.state = SlotState.building
        self.outcome: Optional[SlotOutcome] = None
        # Scratch space for the tracker that owns the slot
        self.data: Dict[str, Any] = {}


class ObservationContext:
    """
    State of one unit of work: the acting user and the in-flight event slots.

    Replaces per-process statics, so two units of work never share slots.
    """

    def __init__(self, actor: Optional[Actor] = None):
        self.actor = actor or Actor()
        self.finalized = False
        self.saved_event_ids: List[int] = []
        self.deleted_event_ids: List[int] = []
        # Scratch space shared by trackers, e.g. terms attached during this request
        self.state: Dict[str, Any] = {}
        self._slots: Dict[str, EventSlot] = {}
        self._gated: Set[str] = set()

    def ensure_open(self) -> None:
        if self.finalized:
            raise SlotStateError("Unit of work has already been finalized")

    def slot_state(self, name: str) -> SlotState:
        slot = self._slots.get(name)
        if slot is None:
            return SlotState.absent
        return slot.state

    def get_slot(self, name: str) -> Optional[EventSlot]:
        return self._slots.get(name)

    def get_event(self, name: str) -> Optional[Event]:
        """The in-flight event of a slot, for amending"""
        self.ensure_open()
        slot = self._slots.get(name)
        return slot.event if slot else None

    def open_slot(self, slot: EventSlot) -> EventSlot:
        self.ensure_open()
        if slot.name in self._slots:
            raise SlotStateError(f"Slot {slot.name!r} is already open")
        self._slots[slot.name] = slot
        return slot

    def is_gated(self, name: str) -> bool:
        return name in self._gated

    def gate(self, name: str) -> None:
        self._gated.add(name)

    def slots(self) -> List[EventSlot]:
        return list(self._slots.values())


class FinalizeSummary(BaseModel):
    saved: List[int] = Field(default_factory=list)
    deleted: List[int] = Field(default_factory=list)
    discarded: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)


class EventAggregator:
    def __init__(
        self,
        uow: UnitOfWork,
        resolvers: ResolverRegistry,
        policy: Optional[ActorPolicy] = None,
        clock: Callable[[], datetime] = datetimes.now_site,
    ):
        self.uow = uow
        self.resolvers = resolvers
        self.policy = policy or ActorPolicy()
        self.clock = clock

    def create_event(
        self,
        event_type: str,
        subject: Subject = None,
        metadata: Optional[Dict[str, Any]] = None,
        properties: Optional[Iterable[Property]] = None,
        actor: Optional[Actor] = None,
        all_users: bool = False,
    ) -> Optional[Event]:
        """
        Create an unsaved event, or None if the actor isn't tracked.

        The subject can be an object reference, a bare object type, or None.
        Its subtype and core properties come from the type's resolver;
        properties passed in are added after, replacing core ones with the
        same key.
        """
        if not self.policy.allows(actor, all_users):
            actor_id = actor.id if actor else 0
            logger.debug(f"{event_type} event not logged, actor {actor_id} isn't tracked")
            return None

        actor = actor or Actor()
        if isinstance(subject, str):
            subject = ObjectReference(type=subject)

        event = Event(
            event_type=event_type,
            occurred_at=self.clock(),
            actor_id=actor.id,
            actor_name=actor.name,
            actor_role=actor.role_string,
            actor_ip=actor.ip,
            actor_location=actor.location,
            actor_agent=actor.agent,
            metadata=MetadataSet.from_dict(metadata),
        )

        if subject is not None:
            resolver = self.resolvers.get(subject.type)
            event.object_type = subject.type
            event.object_key = subject.key
            event.object_name = subject.name
            if resolver is not None:
                event.object_subtype = resolver.get_subtype(subject.key)
                event.object_name = event.object_name or resolver.get_name(subject.key)
                event.add_props(resolver.get_core_properties(subject.key))
            if not event.object_name:
                event.object_name = resolver.fallback_name(subject.key) if resolver else str(subject)

        event.add_props(properties)
        return event

    async def begin(
        self,
        context: ObservationContext,
        slot: str,
        event_type: str,
        subject: Subject = None,
        *,
        actor: Optional[Actor] = None,
        all_users: bool = False,
        creating: bool = False,
        reuse_window: Optional[timedelta] = None,
        before_save: Optional[BeforeSave] = None,
    ) -> Optional[Event]:
        """
        Get the in-flight event for a slot, creating it on first use.

        Returns None if the actor isn't tracked; the slot then stays closed
        for the rest of the unit of work. With a reuse window, the actor's
        most recent saved event of the same type and subject is amended
        instead of starting a new one, if it's recent enough.
        """
        context.ensure_open()

        if context.slot_state(slot) == SlotState.building:
            return context.get_slot(slot).event
        if context.is_gated(slot):
            return None

        actor = actor or context.actor
        if not self.policy.allows(actor, all_users):
            logger.debug(f"Slot {slot!r} gated for actor {actor.id}")
            context.gate(slot)
            return None

        event = None
        reusing = False
        if reuse_window is not None and isinstance(subject, ObjectReference):
            recent = await self.uow.events.most_recent_by_type_and_subject(
                event_type, subject.type, subject.key, actor.id
            )
            if recent is not None and self.clock() - recent.occurred_at <= reuse_window:
                logger.debug(f"Reusing event {recent.id} for slot {slot!r}")
                event = recent
                reusing = True

        if event is None:
            event = self.create_event(event_type, subject, actor=actor, all_users=all_users)

        context.open_slot(EventSlot(slot, event, creating=creating, before_save=before_save, reusing=reusing))
        return event

    async def finalize(self, context: ObservationContext) -> FinalizeSummary:
        """Save, delete or discard every slot's event, in the order the slots were opened."""
        context.ensure_open()
        summary = FinalizeSummary()

        for slot in context.slots():
            if slot.before_save is not None:
                result = slot.before_save(slot)
                if inspect.isawaitable(result):
                    await result

            event = slot.event
            if slot.creating or event.has_changes():
                ok = await self.save(event, context)
                slot.outcome = SlotOutcome.saved if ok else SlotOutcome.failed
            elif not event.is_new():
                ok = await self.delete(event, context)
                slot.outcome = SlotOutcome.deleted if ok else SlotOutcome.failed
            else:
                logger.debug(f"Discarding {event.event_type} event, nothing changed")
                slot.outcome = SlotOutcome.discarded

            if slot.outcome == SlotOutcome.saved:
                summary.saved.append(event.id)
            elif slot.outcome == SlotOutcome.deleted:
                summary.deleted.append(event.id)
            elif slot.outcome == SlotOutcome.discarded:
                summary.discarded.append(slot.name)
            else:
                summary.failed.append(slot.name)
            slot.state = SlotState.finalized

        context.finalized = True
        return summary

    async def log_event(
        self,
        context: ObservationContext,
        event_type: str,
        subject: Subject = None,
        metadata: Optional[Dict[str, Any]] = None,
        properties: Optional[Iterable[Property]] = None,
        actor: Optional[Actor] = None,
        all_users: bool = False,
    ) -> Optional[Event]:
        """Create and save a one-shot event right away"""
        context.ensure_open()
        event = self.create_event(
            event_type,
            subject,
            metadata=metadata,
            properties=properties,
            actor=actor or context.actor,
            all_users=all_users,
        )
        if event is None:
            return None
        await self.save(event, context)
        return event

    async def continue_session(
        self,
        context: ObservationContext,
        event_type: str,
        subject: ObjectReference,
        actor: Optional[Actor] = None,
        now: Optional[datetime] = None,
        window: Optional[timedelta] = None,
    ) -> Optional[Event]:
        """
        Extend the most recent session event for the subject, or start a new one.

        The session continues if no more than `window` has passed since its
        recorded end; activity_end and activity_duration are then moved on.
        Otherwise a new event starts with activity_start = activity_end = now.
        """
        context.ensure_open()
        actor = actor or context.actor
        if not self.policy.allows(actor):
            logger.debug(f"{event_type} not logged, actor {actor.id} isn't tracked")
            return None

        now = now or self.clock()
        if window is None:
            window = timedelta(minutes=ApplicationConfig.ACTIVITY_BREAK_MINUTES)

        recent = await self.uow.events.most_recent_by_type_and_subject(event_type, subject.type, subject.key)
        if recent is not None:
            activity_end = recent.get_meta_val("activity_end")
            if isinstance(activity_end, datetime) and now - activity_end <= window:
                if now <= activity_end:
                    return recent
                activity_start = recent.get_meta_val("activity_start")
                if not isinstance(activity_start, datetime):
                    activity_start = recent.occurred_at
                recent.set_meta("activity_end", now)
                recent.set_meta("activity_duration", datetimes.get_duration_string(activity_start, now))
                await self.save(recent, context)
                return recent

        event = self.create_event(event_type, subject, actor=actor)
        event.occurred_at = now
        event.set_meta("activity_start", now)
        event.set_meta("activity_end", now)
        event.set_meta("activity_duration", "0 minutes")
        await self.save(event, context)
        return event

    async def save(self, event: Event, context: Optional[ObservationContext] = None) -> bool:
        """Save and commit one event. Failures are logged, never raised."""
        was_new = event.is_new()
        result = await self.uow.events.save(event)
        if result.is_err():
            logger.error(f"Failed to save {event.event_type} event: {result.error.message}")
            return False

        try:
            await self.uow.commit()
        except PersistenceError as e:
            logger.error(f"Failed to commit {event.event_type} event: {e}")
            if was_new:
                event.id = None
            return False

        logger.info(f"Event saved: {event.id} {event.event_type}")
        if context is not None and event.id not in context.saved_event_ids:
            context.saved_event_ids.append(event.id)
        return True

    async def delete(self, event: Event, context: Optional[ObservationContext] = None) -> bool:
        if event.id is None:
            return False

        result = await self.uow.events.delete(event.id)
        if result.is_err():
            logger.error(f"Failed to delete {event.event_type} event {event.id}: {result.error.message}")
            return False
        if not result.value:
            logger.warning(f"Event {event.id} was already gone")
            return False

        try:
            await self.uow.commit()
        except PersistenceError as e:
            logger.error(f"Failed to delete event {event.id}: {e}")
            return False

        logger.info(f"Event deleted: {event.id} {event.event_type}")
        if context is not None:
            context.deleted_event_ids.append(event.id)
            if event.id in context.saved_event_ids:
                context.saved_event_ids.remove(event.id)
        return True

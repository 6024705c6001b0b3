import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy import String, and_, cast, delete, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error, Result, Return
from logify.app.repositories.event_repository import IEventRepository
from logify.domain import datetimes, serialization
from logify.domain.entities import EventMetaRecord, EventPropertyRecord, EventRecord, SortDirection
from logify.domain.event import Event
from logify.domain.event_query import VALID_OBJECT_TYPES, EventQuery
from logify.domain.property_set import EventMeta, MetadataSet, Property, PropertySet
from logify.domain.values import looks_like_int

logger = logging.getLogger(__name__)

Key = Union[int, str, None]

# Columns matched by the search box
SEARCH_COLUMNS = (
    "actor_name",
    "actor_role",
    "actor_ip",
    "actor_location",
    "actor_agent",
    "event_type",
    "object_type",
    "object_name",
)


def key_to_storage(key: Key) -> Optional[str]:
    return None if key is None else str(key)


def key_type_of(key: Key) -> Optional[str]:
    if key is None:
        return None
    return "int" if isinstance(key, int) else "str"


def key_from_storage(value: Optional[str], key_type: Optional[str] = None) -> Key:
    if value is None or key_type == "str":
        return value
    if key_type == "int" or looks_like_int(value):
        return int(value)
    return value


def clip(value: Optional[str], length: Optional[int]) -> Optional[str]:
    """Cut text to fit a VARCHAR column"""
    if value is None or length is None or len(value) <= length:
        return value
    return value[:length]


def column_length(column: str) -> Optional[int]:
    return getattr(EventRecord.__table__.c[column].type, "length", None)


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class EventRepository(IEventRepository):
    """Event repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _to_event(
        self,
        record: EventRecord,
        properties: List[EventPropertyRecord],
        metadata: List[EventMetaRecord],
    ) -> Event:
        return Event(
            id=record.id,
            occurred_at=datetimes.from_storage(record.occurred_at),
            actor_id=record.actor_id,
            actor_name=record.actor_name,
            actor_role=record.actor_role,
            actor_ip=record.actor_ip,
            actor_location=record.actor_location,
            actor_agent=record.actor_agent,
            event_type=record.event_type,
            object_type=record.object_type,
            object_subtype=record.object_subtype,
            object_key=key_from_storage(record.object_key, record.object_key_type),
            object_name=record.object_name,
            properties=PropertySet(
                Property(row.prop_key, row.source, serialization.decode(row.val), serialization.decode(row.new_val))
                for row in properties
            ),
            metadata=MetadataSet(EventMeta(row.meta_key, serialization.decode(row.meta_value)) for row in metadata),
        )

    def _fill_record(self, record: EventRecord, event: Event) -> None:
        """Copy the event's scalar fields, cut to the column widths"""
        record.occurred_at = datetimes.to_storage(event.occurred_at)
        record.actor_id = event.actor_id
        record.object_key_type = key_type_of(event.object_key)
        for column, value in (
            ("actor_name", event.actor_name),
            ("actor_role", event.actor_role),
            ("actor_ip", event.actor_ip),
            ("actor_location", event.actor_location),
            ("actor_agent", event.actor_agent),
            ("event_type", event.event_type),
            ("object_type", event.object_type),
            ("object_subtype", event.object_subtype),
            ("object_key", key_to_storage(event.object_key)),
        ):
            setattr(record, column, clip(value, column_length(column)))
        name_length = min(column_length("object_name"), ApplicationConfig.MAX_OBJECT_NAME_LENGTH)
        record.object_name = clip(event.object_name, name_length)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save(self, event: Event) -> Result[int]:
        """
        Write the event row and replace its child rows.

        Nothing is committed here; on any database error the session is
        rolled back so no partial event is left behind.
        """
        try:
            if event.is_new():
                record = EventRecord(actor_name=event.actor_name, event_type=event.event_type)
                self._fill_record(record, event)
                self.session.add(record)
                await self.session.flush()
            else:
                record = await self.session.get(EventRecord, event.id)
                if record is None:
                    return Return.err(Error("EVENT_NOT_FOUND", f"Event {event.id} not found"))
                self._fill_record(record, event)
                self.session.add(record)
                await self._delete_children([record.id])
                await self.session.flush()

            await self._save_properties(record.id, event.properties)
            await self._save_metadata(record.id, event.metadata)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save {event.event_type} event: {e}")
            await self.session.rollback()
            return Return.err(Error("EVENT_SAVE_FAILED", f"Failed to save {event.event_type} event"))

        event.id = record.id
        return Return.ok(record.id)

    async def _save_properties(self, event_id: int, properties: PropertySet) -> None:
        for position, prop in enumerate(properties):
            self.session.add(
                EventPropertyRecord(
                    event_id=event_id,
                    position=position,
                    prop_key=prop.key,
                    source=prop.source,
                    val=serialization.encode(prop.value),
                    new_val=serialization.encode(prop.new_value),
                )
            )

    async def _save_metadata(self, event_id: int, metadata: MetadataSet) -> None:
        for position, meta in enumerate(metadata):
            self.session.add(
                EventMetaRecord(
                    event_id=event_id,
                    position=position,
                    meta_key=meta.key,
                    meta_value=serialization.encode(meta.value),
                )
            )

    async def _delete_children(self, event_ids: List[int]) -> None:
        await self.session.execute(delete(EventPropertyRecord).where(EventPropertyRecord.event_id.in_(event_ids)))
        await self.session.execute(delete(EventMetaRecord).where(EventMetaRecord.event_id.in_(event_ids)))

    async def delete(self, event_id: int) -> Result[bool]:
        """
        Delete an event with its properties and metadata.

        Ok(False) if there is no such event. On a database error the session
        is rolled back, as in save().
        """
        try:
            record = await self.session.get(EventRecord, event_id)
            if record is None:
                return Return.ok(False)
            await self._delete_children([event_id])
            await self.session.delete(record)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete event {event_id}: {e}")
            await self.session.rollback()
            return Return.err(Error("EVENT_DELETE_FAILED", f"Failed to delete event {event_id}"))
        return Return.ok(True)

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Bulk delete of everything before the cutoff"""
        stmt = select(EventRecord.id).where(EventRecord.occurred_at < datetimes.to_storage(cutoff))
        result = await self.session.execute(stmt)
        event_ids = list(result.scalars().all())
        if not event_ids:
            return 0

        await self._delete_children(event_ids)
        await self.session.execute(delete(EventRecord).where(EventRecord.id.in_(event_ids)))
        await self.session.flush()
        return len(event_ids)

    async def truncate(self) -> None:
        await self.session.execute(delete(EventPropertyRecord))
        await self.session.execute(delete(EventMetaRecord))
        await self.session.execute(delete(EventRecord))
        await self.session.flush()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load(self, event_id: int) -> Optional[Event]:
        """Get event by ID, with properties and metadata"""
        events = await self.load_many([event_id])
        return events[0] if events else None

    async def load_many(self, event_ids: List[int]) -> List[Event]:
        """Get events by ID in the order given. Ids that don't exist are skipped."""
        if not event_ids:
            return []

        result = await self.session.exec(select(EventRecord).where(EventRecord.id.in_(event_ids)))
        records = {record.id: record for record in result.all()}

        prop_stmt = (
            select(EventPropertyRecord)
            .where(EventPropertyRecord.event_id.in_(event_ids))
            .order_by(EventPropertyRecord.event_id, EventPropertyRecord.position, EventPropertyRecord.id)
        )
        properties: Dict[int, List[EventPropertyRecord]] = {}
        for row in (await self.session.exec(prop_stmt)).all():
            properties.setdefault(row.event_id, []).append(row)

        meta_stmt = (
            select(EventMetaRecord)
            .where(EventMetaRecord.event_id.in_(event_ids))
            .order_by(EventMetaRecord.event_id, EventMetaRecord.position, EventMetaRecord.id)
        )
        metadata: Dict[int, List[EventMetaRecord]] = {}
        for row in (await self.session.exec(meta_stmt)).all():
            metadata.setdefault(row.event_id, []).append(row)

        return [
            self._to_event(records[event_id], properties.get(event_id, []), metadata.get(event_id, []))
            for event_id in event_ids
            if event_id in records
        ]

    async def most_recent_by_type_and_subject(
        self,
        event_type: str,
        object_type: Optional[str],
        object_key: Key,
        actor_id: Optional[int] = None,
    ) -> Optional[Event]:
        """Newest matching event, using the (event_type, object_type, object_key, occurred_at) index"""
        stmt = select(EventRecord.id).where(EventRecord.event_type == event_type)
        stmt = stmt.where(
            EventRecord.object_type.is_(None) if object_type is None else EventRecord.object_type == object_type
        )
        stmt = stmt.where(
            EventRecord.object_key.is_(None) if object_key is None else EventRecord.object_key == str(object_key)
        )
        if actor_id is not None:
            stmt = stmt.where(EventRecord.actor_id == actor_id)
        stmt = stmt.order_by(EventRecord.occurred_at.desc(), EventRecord.id.desc()).limit(1)

        result = await self.session.execute(stmt)
        event_id = result.scalar_one_or_none()
        if event_id is None:
            return None
        return await self.load(event_id)

    async def count_all(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(EventRecord))
        return result.scalar_one()

    async def search(self, query: EventQuery) -> Tuple[int, List[int]]:
        """
        Count the events matching the query, then fetch one page of their ids.

        Rows are ordered by the requested column with the id as tiebreaker, so
        paging is stable when the sort column has duplicates.
        """
        conditions = self._conditions(query)

        count_stmt = select(func.count()).select_from(EventRecord).where(*conditions)
        filtered = (await self.session.execute(count_stmt)).scalar_one()

        sort_column = getattr(EventRecord, query.sort_column)
        if query.sort_direction == SortDirection.asc:
            order = (sort_column.asc(), EventRecord.id.asc())
        else:
            order = (sort_column.desc(), EventRecord.id.desc())

        page_stmt = (
            select(EventRecord.id).where(*conditions).order_by(*order).offset(query.offset).limit(query.length)
        )
        result = await self.session.execute(page_stmt)
        return filtered, list(result.scalars().all())

    def _conditions(self, query: EventQuery) -> list:
        conditions = []

        if query.search:
            pattern = f"%{escape_like(query.search)}%"
            columns = [getattr(EventRecord, name) for name in SEARCH_COLUMNS]
            columns.append(cast(EventRecord.occurred_at, String))
            conditions.append(or_(*(column.ilike(pattern, escape="\\") for column in columns)))

        object_type_condition = self._object_type_condition(query)
        if object_type_condition is not None:
            conditions.append(object_type_condition)

        if query.start_date:
            conditions.append(EventRecord.occurred_at >= datetimes.start_of_day(query.start_date))
        if query.end_date:
            day_after: date = query.end_date + timedelta(days=1)
            conditions.append(EventRecord.occurred_at < datetimes.start_of_day(day_after))

        if query.event_type:
            conditions.append(EventRecord.event_type == query.event_type)
        if query.user_id is not None:
            conditions.append(EventRecord.actor_id == query.user_id)
        if query.role:
            conditions.append(EventRecord.actor_role.ilike(f"%{escape_like(query.role)}%", escape="\\"))

        return conditions

    def _object_type_condition(self, query: EventQuery):
        """
        Object type predicate, or None to match everything.

        A post type or taxonomy narrows only its own object type; the other
        selected types still match in full. Selecting nothing matches only
        events without a subject.
        """
        if query.all_object_types_selected() and not query.post_type and not query.taxonomy:
            return None

        selected = list(VALID_OBJECT_TYPES) if query.object_types is None else list(query.object_types)
        if not selected:
            return EventRecord.object_type.is_(None)

        clauses = []
        plain_types = []
        for object_type in selected:
            if object_type == "post" and query.post_type:
                clauses.append(and_(EventRecord.object_type == "post", EventRecord.object_subtype == query.post_type))
            elif object_type == "term" and query.taxonomy:
                clauses.append(and_(EventRecord.object_type == "term", EventRecord.object_subtype == query.taxonomy))
            else:
                plain_types.append(object_type)
        if plain_types:
            clauses.append(EventRecord.object_type.in_(plain_types))
        return or_(*clauses)

    # ------------------------------------------------------------------
    # Filter options
    # ------------------------------------------------------------------

    async def distinct_event_types(self) -> List[str]:
        stmt = select(EventRecord.event_type).distinct().order_by(EventRecord.event_type)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def distinct_actors(self) -> Dict[int, str]:
        stmt = select(EventRecord.actor_id, EventRecord.actor_name).order_by(EventRecord.id)
        result = await self.session.execute(stmt)
        actors: Dict[int, str] = {}
        for actor_id, actor_name in result.all():
            actors[actor_id] = actor_name
        return actors

    async def distinct_roles(self) -> List[str]:
        """Individual roles, split out of the comma-joined role column"""
        stmt = select(EventRecord.actor_role).distinct()
        result = await self.session.execute(stmt)
        roles = set()
        for role_string in result.scalars().all():
            for role in (role_string or "none").split(","):
                if role.strip():
                    roles.add(role.strip())
        ordered = sorted((role for role in roles if role != "none"), key=str.lower)
        if "none" in roles:
            ordered.insert(0, "none")
        return ordered

    async def distinct_subtypes(self, object_type: str) -> List[str]:
        stmt = (
            select(EventRecord.object_subtype)
            .where(EventRecord.object_type == object_type, EventRecord.object_subtype.is_not(None))
            .distinct()
            .order_by(EventRecord.object_subtype)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def date_range(self) -> Tuple[Optional[date], Optional[date]]:
        stmt = select(func.min(EventRecord.occurred_at), func.max(EventRecord.occurred_at))
        first, last = (await self.session.execute(stmt)).one()
        return (first.date() if first else None, last.date() if last else None)

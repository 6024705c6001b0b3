import logging
from copy import deepcopy
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from libs.result import Error, Result, Return
from logify.app.repositories.object_catalog import IObjectCatalog, Key, ObjectRef
from logify.domain.entities import ObjectSnapshotRecord

logger = logging.getLogger(__name__)

Slot = Tuple[str, str]


class InMemoryObjectCatalog(IObjectCatalog):
    """
    Object catalog kept in process memory.

    Keys are compared as text, so 5 and "5" name the same object. Putting a
    snapshot for an object already known merges it over the stored one.
    """

    def __init__(self):
        self._objects: Dict[Slot, Dict[str, Any]] = {}

    def _slot(self, object_type: str, key: Key) -> Slot:
        return object_type, str(key)

    def get(self, object_type: str, key: Key) -> Optional[Dict[str, Any]]:
        if key is None:
            return None
        snapshot = self._objects.get(self._slot(object_type, key))
        return deepcopy(snapshot) if snapshot is not None else None

    def put(self, object_type: str, key: Key, snapshot: Dict[str, Any]) -> None:
        if key is None:
            return
        slot = self._slot(object_type, key)
        merged = dict(self._objects.get(slot) or {})
        merged.update(deepcopy(snapshot))
        self._objects[slot] = merged

    def remove(self, object_type: str, key: Key) -> None:
        if key is None:
            return
        if self._objects.pop(self._slot(object_type, key), None) is not None:
            logger.debug(f"Removed {object_type} {key} from catalog")

    def all(self, object_type: str) -> List[Dict[str, Any]]:
        return [deepcopy(snapshot) for (stored_type, _), snapshot in self._objects.items() if stored_type == object_type]

    async def load(self, refs: Iterable[ObjectRef]) -> None:
        pass

    async def load_type(self, object_type: str) -> None:
        pass

    async def flush(self) -> Result[int]:
        return Return.ok(0)

    def clear(self) -> None:
        self._objects.clear()


class SqlModelObjectCatalog(InMemoryObjectCatalog):
    """
    Object catalog stored in the object_snapshots table.

    Works as a per-unit-of-work working set over the session: load() reads
    rows in, reads and writes happen in memory, flush() writes the changed
    objects back. Nothing is committed here; the unit of work commits.
    """

    def __init__(self, session: AsyncSession):
        super().__init__()
        self.session = session
        self._loaded: Set[Slot] = set()
        self._loaded_types: Set[str] = set()
        self._dirty: Set[Slot] = set()
        self._removed: Set[Slot] = set()

    def put(self, object_type: str, key: Key, snapshot: Dict[str, Any]) -> None:
        super().put(object_type, key, snapshot)
        if key is not None:
            slot = self._slot(object_type, key)
            self._dirty.add(slot)
            self._removed.discard(slot)

    def remove(self, object_type: str, key: Key) -> None:
        super().remove(object_type, key)
        if key is not None:
            slot = self._slot(object_type, key)
            self._removed.add(slot)
            self._dirty.discard(slot)

    async def load(self, refs: Iterable[ObjectRef]) -> None:
        wanted: Dict[str, Set[str]] = {}
        for object_type, key in refs:
            if object_type is None or key is None or object_type in self._loaded_types:
                continue
            slot = self._slot(object_type, key)
            if slot not in self._loaded:
                wanted.setdefault(object_type, set()).add(slot[1])

        for object_type, keys in wanted.items():
            statement = select(ObjectSnapshotRecord).where(
                ObjectSnapshotRecord.object_type == object_type,
                ObjectSnapshotRecord.object_key.in_(keys),
            )
            await self._read(statement)
            self._loaded.update((object_type, key) for key in keys)

    async def load_type(self, object_type: str) -> None:
        if object_type in self._loaded_types:
            return
        await self._read(select(ObjectSnapshotRecord).where(ObjectSnapshotRecord.object_type == object_type))
        self._loaded_types.add(object_type)

    async def _read(self, statement) -> None:
        try:
            rows = (await self.session.exec(statement)).all()
        except SQLAlchemyError as e:
            # Objects that can't be read look deleted; the log itself still works
            logger.error(f"Failed to read object snapshots: {e}")
            return

        for row in rows:
            slot = (row.object_type, row.object_key)
            if slot in self._removed:
                continue
            stored = dict(row.snapshot or {})
            # Puts made before the row was read win over the stored fields
            stored.update(self._objects.get(slot) or {})
            self._objects[slot] = stored

    async def flush(self) -> Result[int]:
        if not self._dirty and not self._removed:
            return Return.ok(0)

        dirty, removed = sorted(self._dirty), sorted(self._removed)
        try:
            for object_type, key in removed:
                await self.session.execute(
                    delete(ObjectSnapshotRecord).where(
                        ObjectSnapshotRecord.object_type == object_type,
                        ObjectSnapshotRecord.object_key == key,
                    )
                )
            for object_type, key in dirty:
                snapshot = self._objects[(object_type, key)]
                record = await self.session.get(ObjectSnapshotRecord, (object_type, key))
                if record is None:
                    record = ObjectSnapshotRecord(object_type=object_type, object_key=key)
                    record.snapshot = deepcopy(snapshot)
                else:
                    record.snapshot = {**(record.snapshot or {}), **deepcopy(snapshot)}
                record.updated_at = datetime.utcnow()
                self.session.add(record)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to write object snapshots: {e}")
            await self.session.rollback()
            return Return.err(Error("CATALOG_FLUSH_FAILED", "Failed to write object snapshots"))

        self._dirty.clear()
        self._removed.clear()
        logger.debug(f"Catalog flushed: {len(dirty)} written, {len(removed)} removed")
        return Return.ok(len(dirty) + len(removed))

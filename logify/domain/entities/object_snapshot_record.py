"""
ObjectSnapshotRecord Entity

Row of the object_snapshots table: the last known state of a live host object.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import JSON, Column, DateTime, Field, SQLModel


class ObjectSnapshotRecord(SQLModel, table=True):
    """
    ObjectSnapshotRecord entity - one row per live host object.

    Business Rules:
    - (object_type, object_key) identifies the object; keys are stored as text
    - A row exists while the object exists; deleting the object deletes the row
    - snapshot holds the host's own field names, merged over on every report
    """

    __tablename__ = "object_snapshots"

    object_type: str = Field(primary_key=True, max_length=20)
    object_key: str = Field(primary_key=True, max_length=191)

    snapshot: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    updated_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime, nullable=False)
    )

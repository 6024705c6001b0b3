"""
EventRecord Entity

Row of the events table: the scalar columns of an Event.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel


class EventRecord(SQLModel, table=True):
    """
    EventRecord entity - one row per logged event.

    Business Rules:
    - occurred_at is naive site-local time, set once
    - actor_name/object_name are snapshots that survive deletion of the actor/object
    - actor_role is the comma-joined role list, 'none' for anonymous actors
    - object_key holds int or string keys as text; object_key_type ("int" or "str") says which
    - Properties and metadata live in child tables keyed by event_id
    """

    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)

    occurred_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    # Actor
    actor_id: int = Field(default=0, index=True)
    actor_name: str = Field(max_length=255)
    actor_role: str = Field(default="none", max_length=255)
    actor_ip: Optional[str] = Field(default=None, max_length=40)
    actor_location: Optional[str] = Field(default=None, max_length=255)
    actor_agent: Optional[str] = Field(default=None, max_length=255)

    event_type: str = Field(max_length=255)

    # Subject
    object_type: Optional[str] = Field(default=None, max_length=10)
    object_subtype: Optional[str] = Field(default=None, max_length=50)
    object_key: Optional[str] = Field(default=None, max_length=50)
    object_key_type: Optional[str] = Field(default=None, max_length=3)
    object_name: Optional[str] = Field(default=None, max_length=100)

    __table_args__ = (
        Index("idx_events_occurred_at", "occurred_at"),
        Index("idx_events_type_object", "event_type", "object_type", "object_key", "occurred_at"),
    )

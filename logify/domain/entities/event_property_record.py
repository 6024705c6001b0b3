"""
EventPropertyRecord Entity

Row of the event_properties table.
"""

from typing import Optional

from sqlmodel import Column, Field, SQLModel, Text


class EventPropertyRecord(SQLModel, table=True):
    """
    EventPropertyRecord entity - one row per property of an event.

    Business Rules:
    - Rows are replaced wholesale each time the event is saved
    - val/new_val hold JSON from the typed value codec
    - source is informational only (no referential integrity)
    """

    __tablename__ = "event_properties"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="events.id", nullable=False, index=True)

    position: int = Field(default=0)  # insertion order within the event
    prop_key: str = Field(max_length=100)
    source: Optional[str] = Field(default=None, max_length=100)
    val: Optional[str] = Field(default=None, sa_column=Column(Text))
    new_val: Optional[str] = Field(default=None, sa_column=Column(Text))

"""
EventMetaRecord Entity

Row of the event_metadata table.
"""

from typing import Optional

from sqlmodel import Column, Field, SQLModel, Text


class EventMetaRecord(SQLModel, table=True):
    """
    EventMetaRecord entity - one row per metadata entry of an event.

    Business Rules:
    - Rows are replaced wholesale each time the event is saved
    - meta_value holds JSON from the typed value codec
    """

    __tablename__ = "event_metadata"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="events.id", nullable=False, index=True)

    position: int = Field(default=0)
    meta_key: str = Field(max_length=100)
    meta_value: Optional[str] = Field(default=None, sa_column=Column(Text))

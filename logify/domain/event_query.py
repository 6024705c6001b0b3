"""
Event Query

Input of a log search. Every field is sanitized on construction, so invalid
input is coerced to a safe default instead of failing the request.
"""

from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, field_validator, model_validator

from config import ApplicationConfig
from logify.domain.entities.enums import ObjectType, SortDirection

# Sortable columns, in the order the log table shows them
SORT_COLUMNS = [
    "id",
    "occurred_at",
    "actor_name",
    "actor_ip",
    "event_type",
    "object_name",
    "object_type",
]
DEFAULT_SORT_COLUMN = "occurred_at"

VALID_OBJECT_TYPES = [object_type.value for object_type in ObjectType]


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class EventQuery(BaseModel):
    draw: int = 0
    search: Optional[str] = None

    # None means all object types. An empty list means events without a subject.
    object_types: Optional[List[str]] = None
    post_type: Optional[str] = None
    taxonomy: Optional[str] = None

    start_date: Optional[date] = None
    end_date: Optional[date] = None

    event_type: Optional[str] = None
    user_id: Optional[int] = None
    role: Optional[str] = None

    sort_column: Union[int, str] = DEFAULT_SORT_COLUMN
    sort_direction: SortDirection = SortDirection.desc

    offset: int = 0
    length: int = ApplicationConfig.ITEMS_PER_PAGE

    @field_validator("draw", mode="before")
    @classmethod
    def _sanitize_draw(cls, value):
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return 0

    @field_validator("search", "post_type", "taxonomy", "event_type", "role", mode="before")
    @classmethod
    def _sanitize_text(cls, value):
        return _blank_to_none(value)

    @field_validator("object_types", mode="before")
    @classmethod
    def _sanitize_object_types(cls, value):
        if value is None:
            return None
        if isinstance(value, dict):
            # {"post": true, "user": false, ...} as sent by the log page checkboxes
            value = [key for key, selected in value.items() if selected]
        return [str(item) for item in value if str(item) in VALID_OBJECT_TYPES]

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _sanitize_date(cls, value):
        value = _blank_to_none(value)
        if value is None or isinstance(value, date):
            return value
        try:
            return datetime.strptime(str(value), "%Y-%m-%d").date()
        except ValueError:
            return None

    @field_validator("user_id", mode="before")
    @classmethod
    def _sanitize_user_id(cls, value):
        value = _blank_to_none(value)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("sort_column", mode="before")
    @classmethod
    def _sanitize_sort_column(cls, value):
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            value = int(value)
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < len(SORT_COLUMNS):
                return SORT_COLUMNS[value]
            return DEFAULT_SORT_COLUMN
        if value in SORT_COLUMNS:
            return value
        return DEFAULT_SORT_COLUMN

    @field_validator("sort_direction", mode="before")
    @classmethod
    def _sanitize_sort_direction(cls, value):
        if isinstance(value, SortDirection):
            return value
        value = str(value or "").upper()
        if value in (SortDirection.asc.value, SortDirection.desc.value):
            return value
        return SortDirection.desc

    @field_validator("offset", mode="before")
    @classmethod
    def _sanitize_offset(cls, value):
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return 0

    @field_validator("length", mode="before")
    @classmethod
    def _sanitize_length(cls, value):
        try:
            value = int(value)
        except (TypeError, ValueError):
            return ApplicationConfig.ITEMS_PER_PAGE
        if value < 1:
            return ApplicationConfig.ITEMS_PER_PAGE
        return min(value, ApplicationConfig.MAX_PAGE_LENGTH)

    @model_validator(mode="after")
    def _check_date_order(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            self.start_date, self.end_date = self.end_date, self.start_date
        return self

    def all_object_types_selected(self) -> bool:
        if self.object_types is None:
            return True
        return not set(VALID_OBJECT_TYPES) - set(self.object_types)

"""
Typed value codec.

Property and metadata values are stored as JSON text. Datetimes and object
references are tagged so they come back as the same types. The encoded form is
also the canonical form used for structural equality.
"""

import json
from datetime import datetime
from typing import Any, Optional

from logify.domain.object_reference import ObjectReference

DATETIME_TAG = "__datetime__"
OBJECT_REF_TAG = "__object_ref__"


def _to_plain(value: Any) -> Any:
    if isinstance(value, ObjectReference):
        return {OBJECT_REF_TAG: {"type": value.type, "key": value.key, "name": value.name}}
    if isinstance(value, datetime):
        return {DATETIME_TAG: value.isoformat()}
    if isinstance(value, dict):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_plain(v) for v in value]
    return value


def _from_plain(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) == 1 and DATETIME_TAG in value:
            return datetime.fromisoformat(value[DATETIME_TAG])
        if len(value) == 1 and OBJECT_REF_TAG in value:
            return ObjectReference(**value[OBJECT_REF_TAG])
        return {k: _from_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_plain(v) for v in value]
    return value


def encode(value: Any) -> Optional[str]:
    """Serialize a value for storage. None stays None."""
    if value is None:
        return None
    return json.dumps(_to_plain(value))


def decode(text: Optional[str]) -> Any:
    if text is None:
        return None
    try:
        return _from_plain(json.loads(text))
    except (ValueError, TypeError):
        # Rows written by something else: keep the raw text
        return text


def canonical(value: Any) -> str:
    """Stable text form used to compare composite values."""
    return json.dumps(_to_plain(value), sort_keys=True)

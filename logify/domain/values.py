"""
Value Normalizer

Converts raw values as the host stores them (JSON blobs, stringified numbers,
booleans and datetimes) into typed values, and compares them structurally.
"""

import json
import re
from datetime import datetime
from typing import Any, Tuple

from logify.domain import datetimes
from logify.domain.object_reference import ObjectReference
from logify.domain.serialization import canonical

UTC_KEY_SUFFIXES = ("_gmt", "_utc")

_INT_RE = re.compile(r"0|-?[1-9][0-9]*")
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$")
_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def looks_like_null(value: str) -> bool:
    return value == "null"


def looks_like_bool(value: str) -> bool:
    return value in ("true", "false")


def looks_like_int(value: str) -> bool:
    return _INT_RE.fullmatch(value) is not None


def looks_like_float(value: str) -> bool:
    if _FLOAT_RE.match(value) is None:
        return False
    return str(float(value)) == value


def looks_like_datetime(value: str) -> bool:
    return _DATETIME_RE.match(value) is not None


def looks_like_composite(value: str) -> bool:
    stripped = value.strip()
    return (stripped.startswith("{") and stripped.endswith("}")) or (
        stripped.startswith("[") and stripped.endswith("]")
    )


def try_deserialize(value: str) -> Tuple[bool, Any]:
    """Decode a JSON object or array. Returns (ok, decoded)."""
    if not looks_like_composite(value):
        return False, None
    try:
        return True, json.loads(value)
    except ValueError:
        return False, None


def normalize(key: str, value: Any) -> Any:
    """
    Convert a raw stored value into its canonical typed value.

    Strings are deserialized if they hold a JSON object/array, then checked, in
    order, for null, bool, int, float and 'YYYY-MM-DD HH:MM:SS' datetime.
    Datetimes are UTC when the key ends in _gmt/_utc, otherwise site time.
    """
    if value is None:
        return None

    result = value
    if isinstance(result, str):
        ok, decoded = try_deserialize(result)
        if ok:
            result = decoded

    if isinstance(result, dict):
        return {k: normalize(str(k), v) for k, v in result.items()}
    if isinstance(result, list):
        return [normalize(key, v) for v in result]

    if not isinstance(result, str):
        return result

    if looks_like_null(result):
        return None
    if looks_like_bool(result):
        return result == "true"
    if looks_like_int(result):
        return int(result)
    if looks_like_float(result):
        return float(result)
    if looks_like_datetime(result):
        tz = "UTC" if key.endswith(UTC_KEY_SUFFIXES) else "site"
        return datetimes.create_datetime(result, tz)
    return result


def _is_composite(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple, ObjectReference))


def are_equal(value1: Any, value2: Any) -> bool:
    """
    Strict equality by type and value.

    Composite values and object references compare by canonical serialized
    form, so two distinct references to the same {type, key, name} are equal.
    """
    if _is_composite(value1) or _is_composite(value2):
        if type(value1) is not type(value2):
            return False
        return canonical(value1) == canonical(value2)
    if isinstance(value1, datetime) and isinstance(value2, datetime):
        return value1 == value2
    return type(value1) is type(value2) and value1 == value2


def reduce_changes(old: Any, new: Any) -> Tuple[Any, Any]:
    """
    Drop the parts of two values that are equal.

    For two dicts, recurse per key and keep only keys whose values differ,
    so a caller can show just the changed sub-fields of a larger value.
    Anything else is returned unchanged.
    """
    if isinstance(old, dict) and isinstance(new, dict):
        old_reduced = {}
        new_reduced = {}
        for key in list(old.keys()) + [k for k in new.keys() if k not in old]:
            old_inner, new_inner = reduce_changes(old.get(key), new.get(key))
            if key in old and key in new and are_equal(old_inner, new_inner):
                continue
            if key in old:
                old_reduced[key] = old_inner
            if key in new:
                new_reduced[key] = new_inner
        return old_reduced, new_reduced
    return old, new


def diff(old: Any, new: Any) -> bool:
    """True if anything differs between the two values."""
    old_reduced, new_reduced = reduce_changes(old, new)
    if isinstance(old_reduced, dict) and isinstance(new_reduced, dict):
        return bool(old_reduced or new_reduced)
    return not are_equal(old_reduced, new_reduced)

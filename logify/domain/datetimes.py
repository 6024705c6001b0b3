"""
Date and time helpers.

Event timestamps live in the site time zone (ApplicationConfig.SITE_TIMEZONE).
They are stored as naive site-local values and re-zoned on load.
"""

import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config import ApplicationConfig

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATETIME_ZERO = "0000-00-00 00:00:00"

DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30.436875
DAYS_PER_YEAR = 365.2425


def site_timezone() -> tzinfo:
    try:
        return ZoneInfo(ApplicationConfig.SITE_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def resolve_timezone(tz: Union[str, tzinfo, None] = None) -> tzinfo:
    """Map 'site', 'UTC', an IANA name or a tzinfo to a tzinfo."""
    if tz is None or tz == "site":
        return site_timezone()
    if isinstance(tz, tzinfo):
        return tz
    if tz.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(tz)


def now_site() -> datetime:
    return datetime.now(site_timezone())


def create_datetime(value: Optional[str], tz: Union[str, tzinfo, None] = "site") -> Optional[datetime]:
    """
    Parse a 'YYYY-MM-DD HH:MM:SS' string in the given time zone.

    Returns None for None, the zero date, or anything unparsable.
    """
    if value is None or value == DATETIME_ZERO:
        return None
    try:
        parsed = datetime.strptime(value, DATETIME_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=resolve_timezone(tz))


def to_storage(value: datetime) -> datetime:
    """Convert to a naive site-local datetime for the events table."""
    if value.tzinfo is None:
        return value
    return value.astimezone(site_timezone()).replace(tzinfo=None)


def from_storage(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(site_timezone())
    return value.replace(tzinfo=site_timezone())


def format_site(value: datetime) -> str:
    return value.astimezone(site_timezone()).strftime(DATETIME_FORMAT)


def start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def keep_period_days(quantity: int, units: str) -> int:
    """Number of whole days covered by a retention period like (3, 'month')."""
    factors = {
        "day": 1,
        "week": DAYS_PER_WEEK,
        "month": DAYS_PER_MONTH,
        "year": DAYS_PER_YEAR,
    }
    if units not in factors:
        raise ValueError(f"Invalid unit: {units}")
    return abs(math.ceil(quantity * factors[units]))


def get_duration_string(start: datetime, end: datetime) -> str:
    """Human-readable duration, e.g. '1 hour, 5 minutes'."""
    seconds = max(0, int((end - start).total_seconds()))
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60

    parts = []
    if hours:
        parts.append(f"{hours} hour" + ("" if hours == 1 else "s"))
    if minutes or not hours:
        parts.append(f"{minutes} minute" + ("" if minutes == 1 else "s"))
    return ", ".join(parts)


def get_ago_string(value: datetime, now: Optional[datetime] = None) -> str:
    now = now or now_site()
    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "just now"
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'' if count == 1 else 's'} ago"
    return "just now"

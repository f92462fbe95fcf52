"""Timestamp helpers. All stored timestamps are timezone-aware UTC."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime. Naive values are read as local time."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc)


def local_day(value: datetime):
    """Calendar date of ``value`` in the local timezone."""
    return ensure_utc(value).astimezone().date()

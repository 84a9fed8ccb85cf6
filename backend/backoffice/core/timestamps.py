"""
Display-time conversion for timestamps leaving the API.

Stored instants are UTC. Responses shift them by a fixed offset
(IST, +5h30m by default). There is no timezone database or DST logic:
the offset is added and the tzinfo stays UTC.
"""
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from backoffice.core.config import settings

TIMESTAMP_FIELDS = ("createdAt", "updatedAt")


def display_offset() -> timedelta:
    return timedelta(minutes=settings.display_offset_minutes)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite hands these back) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_display_time(value: Optional[datetime]) -> Optional[datetime]:
    """Shift a UTC instant by the display offset; None passes through."""
    if value is None:
        return None
    return as_utc(value) + display_offset()


def normalize_timestamps(
    data: Mapping[str, Any],
    fields: Iterable[str] = TIMESTAMP_FIELDS,
) -> dict[str, Any]:
    """
    Return a copy of a serialized record with its timestamps shifted.

    The input mapping is never modified, so a value can only be shifted
    once per serialization.
    """
    converted = dict(data)
    for field in fields:
        value = converted.get(field)
        if isinstance(value, datetime):
            converted[field] = to_display_time(value)
    return converted

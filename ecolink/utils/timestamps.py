"""
Timestamp normalization for values read back from Firestore.
"""

from datetime import datetime, timezone
from typing import Optional


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse various timestamp formats to timezone-aware datetime (UTC).

    Accepts datetimes (including Firestore's DatetimeWithNanoseconds), ISO
    strings with or without a trailing Z, and objects exposing
    timestamp()/to_datetime(). Anything else yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    try:
        if hasattr(value, "to_datetime"):
            return parse_timestamp(value.to_datetime())
        if hasattr(value, "timestamp"):
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    except (TypeError, ValueError, OSError):
        return None
    return None


def to_iso(value) -> str:
    dt = parse_timestamp(value)
    return dt.isoformat() if dt else ""

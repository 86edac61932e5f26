"""
Time utilities for the API.

Provides the server-side timestamp primitive and timestamp standardization.
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware). Server-assigned timestamps use this."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime | None) -> datetime | None:
    """
    Attach UTC to naive datetimes read back from SQLite.

    Args:
        dt: Datetime or None

    Returns:
        Timezone-aware datetime, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def minutes_from_now(minutes: float, now: datetime | None = None) -> datetime:
    """Return ``now + minutes`` in UTC."""
    return (now or utc_now()) + timedelta(minutes=minutes)


def format_iso8601(dt: datetime | None) -> str | None:
    """
    Format a datetime as ISO 8601 string.

    Args:
        dt: The datetime to format

    Returns:
        ISO 8601 formatted string (e.g., "2024-01-15T10:30:00Z")
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

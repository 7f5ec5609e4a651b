"""Datetime utilities for persistence layer."""

from datetime import datetime, timezone


def normalize_to_utc(dt: datetime) -> datetime:
    """Ensure datetime is UTC and timezone-aware.

    Applied to every datetime written to or compared against the database, so
    stored values and query bounds are always UTC. Naive values (as read back
    from SQLite) are treated as UTC.

    Args:
        dt: datetime to process

    Returns:
        timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def normalize_optional(dt: datetime | None) -> datetime | None:
    """Same as normalize_to_utc, passing None through."""
    if dt is None:
        return None
    return normalize_to_utc(dt)

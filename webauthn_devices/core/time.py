"""Utilities for timezone-aware timestamps."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC timestamp.

    Naive values (as read back from SQLite) are taken to be UTC already;
    aware values are converted, since the database keeps no offset.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)

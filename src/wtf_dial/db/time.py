"""Time utilities for database models."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def to_utc(timestamp: datetime) -> datetime:
    """Return ``timestamp`` as an aware UTC datetime.

    Naive values are taken to be UTC already. SQLite stores datetimes
    without their offset, so anything compared against stored columns must
    be converted first.
    """
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC)


def truncate_to_minute(timestamp: datetime) -> datetime:
    """Return ``timestamp`` in UTC, rounded down to the start of its minute."""
    return to_utc(timestamp).replace(second=0, microsecond=0)

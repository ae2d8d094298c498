"""
Core Utilities.

Shared time helpers used across the package.
All modules should import utilities from this module.

Persisted timestamps are integer milliseconds since the Unix epoch, the
format older stores were written in.
"""

import uuid
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def to_epoch_ms(value: datetime) -> int:
    """
    Convert a datetime to epoch milliseconds.

    Naive datetimes are interpreted as local wall-clock time.
    """
    if value.tzinfo is None:
        value = value.astimezone()
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to an aware datetime in the local timezone."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).astimezone()


def format_local(value: int, fmt: str = "%Y-%m-%d %H:%M") -> str:
    """
    Format epoch milliseconds as local wall-clock text.

    Stored instants can lie outside what datetime represents (before year 1
    or after 9999); those come back as the raw millisecond count.
    """
    try:
        return from_epoch_ms(value).strftime(fmt)
    except (ValueError, OverflowError, OSError):
        return str(value)


def new_note_id() -> str:
    """Allocate a fresh opaque note identifier."""
    return str(uuid.uuid4())

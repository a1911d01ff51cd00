"""UTC time helpers.

Engine datetimes are timezone-aware UTC; paste metadata stores whole unix
seconds. Convert with to_unix / from_timestamp_utc rather than calling
datetime.timestamp() on values of unknown origin.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (the default engine clock)."""
    return datetime.now(UTC)


def from_timestamp_utc(timestamp: float) -> datetime:
    """Aware UTC datetime for unix seconds (e.g. a sweep timestamp argument)."""
    return datetime.fromtimestamp(timestamp, tz=UTC)


def to_unix(dt: datetime) -> int:
    """Whole unix seconds, floored, as stored in paste metadata."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() // 1)

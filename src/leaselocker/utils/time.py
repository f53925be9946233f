"""Time utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def to_unix_nanos(value: datetime) -> int:
    """Convert an aware datetime to integer Unix nanoseconds."""
    if value.tzinfo is None:
        raise ValueError("Expected a timezone-aware datetime")
    delta = value - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def from_unix_nanos(value: int) -> datetime:
    """Convert integer Unix nanoseconds back to an aware UTC datetime."""
    return datetime.fromtimestamp(value // 1_000_000_000, tz=timezone.utc).replace(
        microsecond=(value % 1_000_000_000) // 1_000
    )

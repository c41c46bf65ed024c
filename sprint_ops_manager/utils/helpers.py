"""General utility functions and helper classes."""

from datetime import datetime, timezone
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive chunks of at most `size` items, preserving order."""
    if size < 1:
        raise ValueError(f"Chunk size must be a positive integer, got {size}")
    for index in range(0, len(items), size):
        yield list(items[index : index + size])


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime, name: str = "datetime") -> datetime:
    """Raise ValueError unless `value` carries timezone information."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware, got naive value {value.isoformat()}")
    return value


def format_instant(value: datetime) -> str:
    """Format a timezone-aware datetime as an ISO-8601 instant with offset (2018-10-05T00:00:00+08:00)."""
    return ensure_aware(value).isoformat(timespec="seconds")


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant, rejecting values without a timezone offset."""
    return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")), name=value)

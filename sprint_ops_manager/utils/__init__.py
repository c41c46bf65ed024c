"""Utility modules for shared functionality."""

from .constants import (
    MAX_ISSUES_PER_MOVE,
    SPRINT_DURATION,
    SPRINT_NAME_DAY_FORMAT,
    SPRINT_PAGE_SIZE,
)
from .helpers import chunked, format_instant, parse_instant, utc_now

__all__ = [
    "MAX_ISSUES_PER_MOVE",
    "SPRINT_DURATION",
    "SPRINT_NAME_DAY_FORMAT",
    "SPRINT_PAGE_SIZE",
    "chunked",
    "format_instant",
    "parse_instant",
    "utc_now",
]

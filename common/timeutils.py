"""
Time utilities: UTC now and RFC3339 formatting.

All functions use timezone-aware UTC datetimes.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """
    Format a datetime as RFC3339 in UTC with a Z suffix, second precision.

    >>> to_rfc3339(datetime(2024, 2, 15, 10, 23, 45, 123456, tzinfo=timezone.utc))
    '2024-02-15T10:23:45Z'
    """
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

#!/usr/bin/env python3
"""
Conversion helpers shared by the API services.
"""

from decimal import Decimal
from typing import Optional, Any
from datetime import datetime, timezone


def safe_float(value: Optional[Any], default: float = 0.0) -> float:
    """
    Convert a Numeric column value (Decimal, int, float or None) to float.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_str(value: Optional[Any], default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert a datetime to an ISO 8601 string in UTC.

    Returns:
        ISO format string or None.
    """
    dt = as_utc(dt)
    return dt.isoformat() if dt is not None else None


def days_between(start: Optional[datetime], end: datetime) -> int:
    """Whole days from start to end, never negative; 0 when start is unknown."""
    start = as_utc(start)
    if start is None:
        return 0
    return max(0, (as_utc(end) - start).days)

"""
UTC-first datetime utilities for Health Records Service API.

This module provides consistent datetime handling across the application:
- All datetimes are stored and processed in UTC
- ISO 8601 format used for string serialization
- Timezone-aware parsing and conversion

Design Principles:
- Internal processing: Always use datetime with UTC timezone
- Database storage: full-precision ISO 8601 strings in UTC (SQLite stores as TEXT)
- API responses: ISO 8601 strings with 'Z' suffix

Usage:
    from core.datetime_utils import utc_now, format_iso, to_db_string, from_db_string

    now = utc_now()
    iso_str = format_iso(now)            # "2024-01-15T05:00:00Z"
    stored = to_db_string(now)           # "2024-01-15T05:00:00.123456+00:00"
    assert from_db_string(stored) == now
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """
    Get current datetime in UTC with timezone info.

    Returns:
        datetime: Current time as timezone-aware datetime in UTC.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC

    Args:
        dt: A datetime object (naive or timezone-aware).

    Returns:
        datetime: Timezone-aware datetime in UTC.
    """
    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# =============================================================================
# PARSING
# =============================================================================

def parse_datetime(value: Union[str, datetime]) -> datetime:
    """
    Parse a datetime value to UTC datetime.

    Accepts a datetime object or an ISO 8601 string (with or without
    timezone, 'Z' suffix allowed).

    Raises:
        ValueError: If the value cannot be parsed.

    Examples:
        >>> parse_datetime("2024-01-15T10:30:00Z")
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        return to_utc(value)

    if not isinstance(value, str):
        raise ValueError(f"Expected datetime or string, got {type(value).__name__}")

    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        return to_utc(datetime.fromisoformat(value))
    except ValueError:
        raise ValueError(f"Cannot parse datetime: '{value}'") from None


# =============================================================================
# FORMATTING
# =============================================================================

def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with UTC timezone.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    utc_dt = to_utc(dt)
    # Use 'Z' suffix instead of '+00:00' for cleaner output
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# DATABASE HELPERS
# =============================================================================

def to_db_string(dt: datetime) -> str:
    """
    Convert datetime to string format for SQLite storage.

    Keeps microseconds so a record read back compares equal to the one written.
    """
    return to_utc(dt).isoformat()


def from_db_string(value: Optional[str]) -> Optional[datetime]:
    """
    Parse datetime string from SQLite storage.

    Args:
        value: String from database, or None.

    Returns:
        Parsed datetime in UTC, or None if value is None.
    """
    if value is None:
        return None
    return parse_datetime(value)

"""
Datetime utility functions.
Provides replacements for deprecated datetime functions.
"""

from datetime import datetime
from typing import Optional, Union
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def isoformat_or_none(value: Optional[Union[datetime, str]]) -> Optional[str]:
    """
    Serialize a datetime column value for API responses.

    SQLite hands back naive datetimes (or plain strings for server defaults),
    PostgreSQL aware ones; both are returned as ISO-8601 strings.

    Args:
        value: Datetime, string or None

    Returns:
        ISO-8601 string or None
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return value.isoformat()


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to a naive datetime, convert an aware one to UTC.

    Args:
        value: Datetime from user input or the database

    Returns:
        Timezone-aware UTC datetime
    """
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)

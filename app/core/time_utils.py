"""
UTC datetime helpers.

Every timestamp the service produces (snapshot import times, health checks)
is timezone-aware UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Return current UTC datetime with timezone info attached.

    Example:
        >>> utc_now().tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert a datetime to an ISO8601 UTC string with 'Z' suffix.

    Naive datetimes are taken to be UTC already.

    Example:
        >>> serialize_datetime(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))
        '2024-01-01T12:00:00Z'
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    iso_string = dt.astimezone(timezone.utc).isoformat()

    if iso_string.endswith('+00:00'):
        iso_string = iso_string[:-6] + 'Z'
    return iso_string

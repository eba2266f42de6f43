"""
Timestamp helpers for pipeline records.

Outcomes, analyses and summaries carry ISO-8601 UTC strings so that they can
be handed to callers and the platform API without further conversion.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(ts: Optional[datetime] = None) -> str:
    """
    Format a timestamp as ISO-8601.

    Args:
        ts: Timestamp to format, defaults to now. Naive values are treated as UTC.

    Returns:
        ISO-8601 formatted string
    """
    if ts is None:
        ts = utc_now()
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat()


def now_iso(clock: Clock = utc_now) -> str:
    """ISO-8601 string for the time reported by clock."""
    return format_timestamp(clock())

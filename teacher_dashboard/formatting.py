"""Display formatting for timestamps."""

from datetime import datetime
from typing import Optional

from .gateway.models import parse_timestamp


def _local(dt: datetime) -> datetime:
    # Naive timestamps are already wall-clock time.
    return dt.astimezone() if dt.tzinfo is not None else dt


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


def format_sync_time(value: Optional[str]) -> str:
    """Format a sync stamp as ``5 Mar 2026, 2:07 PM``."""
    dt = parse_timestamp(value)
    if dt is None:
        return "Unknown"
    dt = _local(dt)
    return f"{dt.day} {dt:%b %Y}, {_hour12(dt)}:{dt:%M %p}"


def format_activity_time(dt: Optional[datetime]) -> Optional[str]:
    """Format an activity or due timestamp as ``05 Mar 2026, 02:07 PM``."""
    if dt is None:
        return None
    dt = _local(dt)
    return f"{dt:%d %b %Y}, {_hour12(dt):02d}:{dt:%M %p}"

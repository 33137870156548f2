"""Quiet-hours gate.

Decides whether personal delivery must be deferred. Windows are
hour-of-day ranges, inclusive start and exclusive end, and may wrap
midnight (22 -> 8).
"""

from datetime import datetime
from typing import Optional

import pytz


def is_quiet(start: Optional[int], end: Optional[int], now: int) -> bool:
    """Return True when ``now`` falls inside the quiet window.

    Args:
        start: First quiet hour (0-23) or None
        end: First hour after the window (0-23) or None
        now: Current hour of day in the deployment time zone

    Returns:
        False when either bound is missing. ``start == end`` is an empty
        window.

    Example:
        >>> is_quiet(22, 8, 23), is_quiet(22, 8, 2), is_quiet(22, 8, 9)
        (True, True, False)
    """
    if start is None or end is None:
        return False
    if start <= end:
        return start <= now < end
    return now >= start or now < end


def current_hour(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> int:
    """Hour of day used for quiet-hours checks.

    Args:
        tz_name: pytz zone name; None uses the server-local clock
        now: Instant to convert; defaults to now. A naive value is read as
            UTC when ``tz_name`` is set and as local time otherwise.

    Returns:
        Hour of day, 0-23
    """
    if tz_name is None:
        if now is None:
            return datetime.now().hour
        if now.tzinfo is not None:
            return now.astimezone().hour
        return now.hour

    zone = pytz.timezone(tz_name)
    if now is None:
        return datetime.now(zone).hour
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(zone).hour

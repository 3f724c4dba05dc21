"""
Wall-clock helpers.

Open/closed derivation needs "the current local hour". The clock is injectable so
normalizer tests can pin the hour instead of depending on when they run.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def now_local(timezone: str | None = None) -> datetime:
    """Return the current time, in `timezone` if given, else in the host's local zone."""
    if timezone:
        return datetime.now(ZoneInfo(timezone))
    return datetime.now().astimezone()


def local_clock(timezone: str | None = None) -> Clock:
    """Build a zero-argument clock bound to `timezone`."""
    return lambda: now_local(timezone)

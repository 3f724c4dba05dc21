# src/moodspot/features/opening_hours.py
"""
Open-now heuristic.

We do not parse the OSM `opening_hours` tag; instead each category gets typical hours,
judged against the current local hour (0..23). Categories without typical hours are
treated as open, since there is nothing to judge them by.
"""

from __future__ import annotations


def _cafe_open(hour: int) -> bool:
    return 7 <= hour < 22


def _restaurant_open(hour: int) -> bool:
    # Lunch and dinner service.
    return 11 <= hour < 15 or 17 <= hour < 23


def _bar_open(hour: int) -> bool:
    # Wraps past midnight.
    return hour >= 16 or hour < 2


_TYPICAL_HOURS = {
    "cafe": _cafe_open,
    "restaurant": _restaurant_open,
    "bar": _bar_open,
}


def is_open_now(category: str | None, hour: int) -> bool:
    """Return whether a place of `category` is likely open at local `hour`."""
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be within 0..23, got {hour}")
    check = _TYPICAL_HOURS.get(category or "")
    if check is None:
        return True
    return check(hour)

# src/moodspot/features/pricing.py
"""
Price tier heuristic (place-level).

OpenStreetMap has no reliable price data, so we derive an ordinal 1..4 tier from the
category and cuisine tags:
- 2 by default,
- 3 for restaurants serving one of the "pricier" cuisines (other cuisines keep 2),
- 4 for `cuisine=fine_dining`,
- 1 for `fast_food`, which wins over everything else (a fast-food place tagged
  fine_dining is still fast food).

This is a pure function of the two tags; it never looks at names or ratings.
"""

from __future__ import annotations

DEFAULT_PRICE_TIER = 2
EXPENSIVE_CUISINES = frozenset({"french", "japanese", "italian", "sushi"})


def derive_price_tier(category: str | None, cuisine: str | None) -> int:
    """Return the price tier (1..4) for a place with these category/cuisine tags."""
    if category == "fast_food":
        return 1
    if cuisine == "fine_dining":
        return 4
    if category == "restaurant" and cuisine:
        return 3 if cuisine in EXPENSIVE_CUISINES else 2
    return DEFAULT_PRICE_TIER


def price_symbol(tier: int) -> str:
    """Render a tier as `$`..`$$$$` for list views."""
    return "$" * max(1, min(4, int(tier)))

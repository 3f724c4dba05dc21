"""
Filtering and ordering of a normalized place set.

Filters are conjunctive (price tier AND minimum rating). Sorting is stable, so places
that tie on the sort key keep their relative order from the input.
"""

from __future__ import annotations

from typing import Callable, Collection, Iterable

from moodspot.domain.models import Place

ALL_PRICE_TIERS = frozenset({1, 2, 3, 4})

# sort key -> (key function, descending)
SORT_KEYS: dict[str, tuple[Callable[[Place], float], bool]] = {
    "distance": (lambda p: p.distance_km, False),
    "rating": (lambda p: p.rating, True),
    "price_low": (lambda p: p.price_tier, False),
    "price_high": (lambda p: p.price_tier, True),
}


def passes_filters(place: Place, *, price_tiers: Collection[int], min_rating: float) -> bool:
    return place.price_tier in price_tiers and place.rating >= min_rating


def apply(
    places: Iterable[Place],
    price_tiers: Iterable[int] | None = None,
    min_rating: float = 0.0,
    sort_key: str | None = "distance",
) -> list[Place]:
    """Filter `places` and order them by `sort_key`.

    An unrecognized (or empty) `sort_key` leaves the filtered order untouched.
    """
    tiers = ALL_PRICE_TIERS if price_tiers is None else frozenset(price_tiers)
    kept = [p for p in places if passes_filters(p, price_tiers=tiers, min_rating=min_rating)]

    spec = SORT_KEYS.get(sort_key or "")
    if spec is None:
        return kept
    key, descending = spec
    # sorted() stays stable with reverse=True: equal keys keep input order.
    return sorted(kept, key=key, reverse=descending)

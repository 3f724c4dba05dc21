"""
Place normalizer.

Turns raw Overpass elements into canonical `Place` records:
- drops elements without a name or without a resolvable coordinate,
- computes distance from the query origin,
- synthesizes rating / review count / price tier / open-now via `moodspot.features.*`,
- composes a display address.

Rejected elements are expected (unnamed benches, way nodes, ...) and never fail the
query; they are only counted in the debug log. Input order is preserved.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Iterable, Mapping

from pydantic import ValidationError

from moodspot.core.geo import haversine_km
from moodspot.domain.models import Coordinate, Place
from moodspot.features.opening_hours import is_open_now
from moodspot.features.placeholders import synthesize_rating, synthesize_review_count
from moodspot.features.pricing import derive_price_tier
from moodspot.ingestion.overpass_client import RawElement

logger = logging.getLogger(__name__)

ADDRESS_UNAVAILABLE = "Address not available"
DEFAULT_CUISINE = "Various"
DEFAULT_CATEGORY = "unknown"


def _tag(tags: Mapping[str, str], *keys: str) -> str | None:
    """First non-blank value among `keys`."""
    for key in keys:
        value = tags.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def resolve_coordinate(element: RawElement) -> Coordinate | None:
    """Direct lat/lon first, then the `center` of a way; None if neither is usable."""
    candidates = [(element.lat, element.lon), (element.center_lat, element.center_lon)]
    for lat, lon in candidates:
        if lat is None or lon is None:
            continue
        try:
            return Coordinate(lat=lat, lng=lon)
        except ValidationError:
            continue
    return None


def compose_address(tags: Mapping[str, str]) -> str:
    """`<housenumber> <street>`, else the city, else a fixed marker."""
    street = _tag(tags, "addr:street")
    if street:
        housenumber = _tag(tags, "addr:housenumber")
        return f"{housenumber} {street}" if housenumber else street
    return _tag(tags, "addr:city") or ADDRESS_UNAVAILABLE


def normalize(
    elements: Iterable[RawElement],
    origin: Coordinate,
    *,
    rng: random.Random,
    hour: int,
    category_key: str = "amenity",
) -> list[Place]:
    """Map raw elements to `Place`s, in input order, skipping unusable ones."""
    places: list[Place] = []
    rejected: Counter[str] = Counter()

    for element in elements:
        tags = element.tags
        name = _tag(tags, "name")
        if not name:
            rejected["no_name"] += 1
            continue

        location = resolve_coordinate(element)
        if location is None:
            rejected["no_coordinate"] += 1
            continue

        category = _tag(tags, category_key)
        cuisine = _tag(tags, "cuisine")

        places.append(
            Place(
                id=f"{element.type}/{element.id}",
                name=name,
                address=compose_address(tags),
                rating=synthesize_rating(rng),
                review_count=synthesize_review_count(rng),
                price_tier=derive_price_tier(category, cuisine),
                distance_km=haversine_km(origin, location),
                is_open_now=is_open_now(category, hour),
                location=location,
                category=category or DEFAULT_CATEGORY,
                cuisine=cuisine or DEFAULT_CUISINE,
                contact_phone=_tag(tags, "phone", "contact:phone"),
                contact_website=_tag(tags, "website", "contact:website"),
                osm_type=element.type,
                osm_id=element.id if isinstance(element.id, int) else None,
            )
        )

    if rejected:
        logger.debug("Skipped %d unusable elements: %s", sum(rejected.values()), dict(rejected))
    return places

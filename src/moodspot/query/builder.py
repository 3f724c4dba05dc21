"""
Query builder.

Compiles a mood + origin + radius into a `QuerySpec` (source-agnostic), and renders a
QuerySpec into Overpass QL for the POI data source:

    [out:json][timeout:25];
    (
      node["amenity"="cafe"](around:2000,40.0,-75.0);
      way["amenity"="cafe"](around:2000,40.0,-75.0);
      ...
    );
    out center;

One node + way sub-query per category tag, unioned; Overpass deduplicates elements
inside a union, so the result holds each element at most once.
"""

from __future__ import annotations

from dataclasses import dataclass

from moodspot.catalog.moods import MoodCatalog
from moodspot.domain.errors import InvalidRadius
from moodspot.domain.models import Coordinate

MIN_RADIUS_M = 500
MAX_RADIUS_M = 5000


@dataclass(frozen=True)
class QuerySpec:
    """Compiled search: origin, radius and the category set to union."""

    mood: str
    origin: Coordinate
    radius_m: int
    category_tags: tuple[str, ...]
    tag_key: str = "amenity"


def validate_radius(radius_m: int, *, min_radius_m: int = MIN_RADIUS_M, max_radius_m: int = MAX_RADIUS_M) -> int:
    """Return `radius_m` unchanged if within bounds; out-of-range values are rejected, not clamped."""
    if isinstance(radius_m, bool) or not isinstance(radius_m, int):
        raise InvalidRadius(f"Search radius must be an integer number of meters, got {radius_m!r}")
    if not min_radius_m <= radius_m <= max_radius_m:
        raise InvalidRadius(
            f"Search radius {radius_m} m is outside the supported range {min_radius_m}..{max_radius_m} m"
        )
    return radius_m


def build_query(
    mood_key: str,
    origin: Coordinate,
    radius_m: int,
    *,
    catalog: MoodCatalog,
    tag_key: str = "amenity",
    min_radius_m: int = MIN_RADIUS_M,
    max_radius_m: int = MAX_RADIUS_M,
) -> QuerySpec:
    """Compile a mood profile + location + radius into a `QuerySpec`.

    Raises:
        UnknownMood: If `mood_key` is not in `catalog`.
        InvalidRadius: If `radius_m` is outside `[min_radius_m, max_radius_m]`.
    """
    profile = catalog.get(mood_key)
    validate_radius(radius_m, min_radius_m=min_radius_m, max_radius_m=max_radius_m)
    return QuerySpec(
        mood=profile.key,
        origin=origin,
        radius_m=radius_m,
        category_tags=profile.category_tags,
        tag_key=tag_key,
    )


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def render_overpass_ql(spec: QuerySpec, *, timeout_seconds: int = 25) -> str:
    """Render `spec` as an Overpass QL query body."""
    around = f"(around:{spec.radius_m},{spec.origin.lat},{spec.origin.lng})"
    key = _quote(spec.tag_key)
    lines = [f"[out:json][timeout:{int(timeout_seconds)}];", "("]
    for tag in spec.category_tags:
        selector = f"[{key}={_quote(tag)}]"
        lines.append(f"  node{selector}{around};")
        lines.append(f"  way{selector}{around};")
    lines.append(");")
    lines.append("out center;")
    return "\n".join(lines) + "\n"

from __future__ import annotations
from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt
from typing import Protocol

"""
Geospatial helpers.

A tiny geometry layer so the normalizer can compute distances without pulling in
heavier GIS dependencies.
"""

EARTH_RADIUS_KM = 6371.0


class HasLatLng(Protocol):
    lat: float
    lng: float


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


def haversine_km(a: HasLatLng, b: HasLatLng) -> float:
    """Compute great-circle distance in kilometers between two points."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = radians(b.lat - a.lat)
    dlng = radians(b.lng - a.lng)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    # rounding can push h just past 1 for near-antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_KM * c

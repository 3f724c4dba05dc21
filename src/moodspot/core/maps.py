"""Map-viewer hand-off: build an OpenStreetMap URL centered on a place."""

from __future__ import annotations

from moodspot.core.geo import HasLatLng

DEFAULT_VIEWER_BASE_URL = "https://www.openstreetmap.org/"
DEFAULT_ZOOM = 18


def viewer_url(location: HasLatLng, *, zoom: int = DEFAULT_ZOOM, base_url: str = DEFAULT_VIEWER_BASE_URL) -> str:
    """Return a viewer URL with a marker at `location` and the map centered on it."""
    lat = location.lat
    lng = location.lng
    base = base_url if base_url.endswith("/") else base_url + "/"
    return f"{base}?mlat={lat}&mlon={lng}#map={zoom}/{lat}/{lng}"

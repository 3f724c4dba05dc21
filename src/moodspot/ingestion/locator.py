"""
Caller location.

A Python process has no device geolocation API, so "the host's location capability" is
modelled as a pluggable `LocationProvider`:
- `FixedLocationProvider`: a coordinate from CLI flags, `MOODSPOT_LOCATION`, or settings.
- `IpLocationProvider`: an IP-geolocation HTTP lookup (opt-in; `locator.ip_lookup_url`).

`GeoLocator.locate()` makes exactly one attempt. A missing provider is
`LocationUnavailable`; a provider that refuses or fails is `LocationDenied`.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from moodspot.config.settings import Settings
from moodspot.core.http import get_json
from moodspot.core.ingestion_meta import record_location
from moodspot.domain.errors import LocationDenied, LocationUnavailable
from moodspot.domain.models import Coordinate

logger = logging.getLogger(__name__)

DENIED_MESSAGE = "Please enable location access to find nearby places"


class LocationProvider(Protocol):
    name: str

    async def current_position(self) -> Coordinate: ...


class FixedLocationProvider:
    """Always reports the same coordinate."""

    name = "fixed"

    def __init__(self, coordinate: Coordinate):
        self._coordinate = coordinate

    async def current_position(self) -> Coordinate:
        return self._coordinate


class IpLocationProvider:
    """Resolve the caller's approximate position from their public IP address.

    Accepts the common response shapes (`lat`/`lon`, `latitude`/`longitude`).
    """

    name = "ip_lookup"

    def __init__(self, url: str, *, timeout_seconds: float = 10):
        self._url = url
        self._timeout_seconds = timeout_seconds

    async def current_position(self) -> Coordinate:
        payload: Any = await get_json(self._url, timeout_seconds=self._timeout_seconds)
        if not isinstance(payload, dict):
            raise ValueError("IP lookup returned a non-object body")
        lat = payload.get("lat", payload.get("latitude"))
        lng = payload.get("lon", payload.get("lng", payload.get("longitude")))
        if lat is None or lng is None:
            raise ValueError("IP lookup response has no coordinates")
        return Coordinate(lat=float(lat), lng=float(lng))


class GeoLocator:
    """Single-attempt wrapper around an optional `LocationProvider`."""

    def __init__(self, provider: LocationProvider | None):
        self._provider = provider

    @property
    def available(self) -> bool:
        return self._provider is not None

    async def locate(self) -> Coordinate:
        """Return the caller's coordinate.

        Raises:
            LocationUnavailable: No provider is configured.
            LocationDenied: The provider failed or returned an invalid coordinate.
        """
        if self._provider is None:
            raise LocationUnavailable("Geolocation not supported")
        try:
            coordinate = await self._provider.current_position()
        except (httpx.HTTPError, ValueError, PermissionError) as e:
            logger.warning("Location provider %s failed: %s", self._provider.name, e)
            record_location("none", provider=self._provider.name)
            raise LocationDenied(DENIED_MESSAGE) from e
        record_location("live", provider=self._provider.name)
        return coordinate


def build_locator(settings: Settings, *, override: Coordinate | None = None) -> GeoLocator:
    """Pick a provider: explicit override, then `locator.fixed`, then `locator.ip_lookup_url`."""
    cfg = settings.locator
    if override is not None:
        return GeoLocator(FixedLocationProvider(override))
    if cfg.fixed is not None:
        return GeoLocator(FixedLocationProvider(Coordinate(lat=cfg.fixed.lat, lng=cfg.fixed.lng)))
    if cfg.ip_lookup_url:
        return GeoLocator(IpLocationProvider(cfg.ip_lookup_url, timeout_seconds=cfg.http_timeout_seconds))
    return GeoLocator(None)

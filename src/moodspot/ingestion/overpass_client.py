"""
Overpass ingestion client (OpenStreetMap POIs).

This module is responsible only for:
- sending a compiled `QuerySpec` to an Overpass interpreter endpoint,
- translating transport / status / body problems into `NetworkError`,
- parsing the `elements` array into small typed `RawElement` records.

It intentionally does not judge whether an element is a usable place; see
`moodspot.places.normalize` for that.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from moodspot.config.settings import Settings
from moodspot.core.cancel import CancelToken, run_cancellable
from moodspot.core.http import post_text
from moodspot.core.ingestion_meta import record_fetch
from moodspot.domain.errors import NetworkError
from moodspot.query.builder import QuerySpec, render_overpass_ql

logger = logging.getLogger(__name__)

OVERPASS_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class RawElement:
    """One untrusted Overpass element: identity, optional coordinates, and tags."""

    id: int | str
    type: str = "node"
    lat: float | None = None
    lon: float | None = None
    center_lat: float | None = None
    center_lon: float | None = None
    tags: Mapping[str, str] = field(default_factory=dict)


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_element(item: Mapping[str, Any]) -> RawElement | None:
    """Parse one element dict; returns None when it has no identity at all."""
    element_id = item.get("id")
    if element_id is None:
        return None

    center = item.get("center")
    center_lat = center_lon = None
    if isinstance(center, Mapping):
        center_lat = _as_float(center.get("lat"))
        center_lon = _as_float(center.get("lon"))

    raw_tags = item.get("tags")
    tags: dict[str, str] = {}
    if isinstance(raw_tags, Mapping):
        tags = {str(k): str(v) for k, v in raw_tags.items() if v is not None}

    return RawElement(
        id=element_id,
        type=str(item.get("type") or "node"),
        lat=_as_float(item.get("lat")),
        lon=_as_float(item.get("lon")),
        center_lat=center_lat,
        center_lon=center_lon,
        tags=tags,
    )


def parse_elements(payload: Any) -> list[RawElement]:
    """Extract `RawElement`s from an Overpass JSON document.

    Raises:
        NetworkError: If the document has no `elements` array, or Overpass flagged a runtime
            error (e.g. the server-side timeout expired) in its `remark`.
    """
    if not isinstance(payload, Mapping) or not isinstance(payload.get("elements"), list):
        remark = payload.get("remark") if isinstance(payload, Mapping) else None
        detail = f": {remark}" if remark else ""
        raise NetworkError(f"Malformed response from places service (missing 'elements'){detail}")

    # Overpass reports an expired or failed query as HTTP 200 with a runtime error remark
    remark = payload.get("remark")
    if isinstance(remark, str) and remark.strip().lower().startswith("runtime error"):
        raise NetworkError(f"Places service query failed: {remark.strip()}")

    out: list[RawElement] = []
    for item in payload["elements"]:
        if not isinstance(item, Mapping):
            continue
        element = parse_element(item)
        if element is not None:
            out.append(element)
    return out


class OverpassClient:
    """POI data source backed by an Overpass API interpreter endpoint."""

    def __init__(self, settings: Settings):
        self._settings = settings

    async def _post(self, query: str) -> Any:
        cfg = self._settings.overpass
        return await post_text(
            cfg.base_url,
            body=query,
            content_type=OVERPASS_CONTENT_TYPE,
            headers={"User-Agent": cfg.user_agent},
            timeout_seconds=cfg.http_timeout_seconds,
        )

    async def fetch(self, spec: QuerySpec, *, cancel_token: CancelToken | None = None) -> list[RawElement]:
        """Run `spec` against Overpass and return the raw elements (possibly empty).

        Raises:
            NetworkError: On timeouts, transport errors, non-2xx responses, or malformed bodies.
            QueryCancelled: If `cancel_token` is cancelled while the request is in flight.
        """
        cfg = self._settings.overpass
        query = render_overpass_ql(spec, timeout_seconds=cfg.query_timeout_seconds)
        logger.info(
            "Fetching places mood=%s tags=%s radius=%dm around %.5f,%.5f",
            spec.mood,
            ",".join(spec.category_tags),
            spec.radius_m,
            spec.origin.lat,
            spec.origin.lng,
        )

        started = time.monotonic()
        try:
            payload = await run_cancellable(self._post(query), cancel_token)
        except httpx.TimeoutException as e:
            record_fetch("none", error="timeout")
            raise NetworkError("Timed out fetching places data") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            record_fetch("none", error=f"http_{status}")
            raise NetworkError(f"Failed to fetch places data (HTTP {status})") from e
        except httpx.HTTPError as e:
            record_fetch("none", error=type(e).__name__)
            raise NetworkError(f"Failed to fetch places data: {e}") from e
        except ValueError as e:
            record_fetch("none", error="invalid_json")
            raise NetworkError("Places service returned an invalid JSON body") from e

        try:
            elements = parse_elements(payload)
        except NetworkError:
            record_fetch("none", error="bad_response")
            raise
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info("Overpass returned %d elements in %d ms", len(elements), elapsed_ms)
        record_fetch("live", elements=len(elements), elapsed_ms=elapsed_ms, url=cfg.base_url)
        return elements

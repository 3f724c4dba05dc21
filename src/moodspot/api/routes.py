"""
API routes.

Endpoints:
- GET  `/api/moods`: list the configured mood catalog.
- POST `/api/search`: main entrypoint (search + filter + sort).
- GET  `/api/map-url`: map viewer URL for a coordinate.
- GET  `/api/settings`: public settings for UI defaults (slider bounds, sort keys).
"""

from __future__ import annotations

import time
from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query

from moodspot.catalog.moods import get_mood_catalog
from moodspot.config.settings import get_settings
from moodspot.core.ingestion_meta import capture_ingestion_meta, record_location
from moodspot.core.maps import viewer_url
from moodspot.domain.errors import (
    InvalidRadius,
    LocationDenied,
    LocationUnavailable,
    MoodSpotError,
    NetworkError,
    UnknownMood,
)
from moodspot.domain.models import Coordinate, SearchRequest, SearchResponse
from moodspot.ingestion.locator import GeoLocator, build_locator
from moodspot.ingestion.overpass_client import OverpassClient
from moodspot.places import filter_sort
from moodspot.search.pipeline import PlaceDataSource, search_places

router = APIRouter()

_ERROR_STATUS: dict[type[MoodSpotError], int] = {
    UnknownMood: 404,
    InvalidRadius: 400,
    LocationUnavailable: 400,
    LocationDenied: 403,
    NetworkError: 502,
}


@lru_cache
def _clients() -> tuple[GeoLocator, PlaceDataSource]:
    settings = get_settings()
    return build_locator(settings), OverpassClient(settings)


def _error_status(exc: MoodSpotError) -> int:
    for cls, status in _ERROR_STATUS.items():
        if isinstance(exc, cls):
            return status
    return 500


@router.get("/api/moods")
def get_moods() -> dict:
    """Return all configured moods (key + label + categories + description)."""
    return {"moods": [profile.model_dump(mode="json") for profile in get_mood_catalog()]}


@router.post("/api/search", response_model=SearchResponse)
async def post_search(request: SearchRequest) -> SearchResponse:
    """Search places for a mood, then filter + sort them for display."""
    settings = get_settings()
    locator, data_source = _clients()
    started = time.perf_counter()
    try:
        with capture_ingestion_meta() as ing:
            if request.origin is not None:
                record_location("request")
            result = await search_places(
                request.mood,
                settings=settings,
                catalog=get_mood_catalog(),
                locator=locator,
                data_source=data_source,
                origin=request.origin,
                radius_m=request.radius_m,
            )
    except MoodSpotError as e:
        raise HTTPException(
            status_code=_error_status(e),
            detail={"code": e.code, "message": e.message},
        ) from e

    places = filter_sort.apply(
        result.places,
        price_tiers=request.price_tiers,
        min_rating=request.min_rating,
        sort_key=request.sort or settings.search.default_sort,
    )
    meta = {
        **result.meta,
        "freshness": ing.as_dict(),
        "api_ms": int((time.perf_counter() - started) * 1000),
    }
    return SearchResponse(
        mood=result.mood,
        origin=result.origin,
        radius_m=result.radius_m,
        outcome=result.outcome,
        message=result.message,
        total_found=len(result.places),
        places=places,
        meta=meta,
    )


@router.get("/api/map-url")
def get_map_url(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
) -> dict:
    """Return the external map viewer URL for a coordinate."""
    cfg = get_settings().map_viewer
    return {"url": viewer_url(Coordinate(lat=lat, lng=lng), zoom=cfg.zoom, base_url=cfg.base_url)}


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return safe-to-expose settings for UI defaults."""
    settings = get_settings()
    search = settings.search
    return {
        "app": {"name": settings.app.name},
        "search": {
            "min_radius_m": search.min_radius_m,
            "max_radius_m": search.max_radius_m,
            "radius_step_m": search.radius_step_m,
            "default_radius_m": search.default_radius_m,
            "default_sort": search.default_sort,
            "sort_keys": list(filter_sort.SORT_KEYS),
            "min_rating_step": search.min_rating_step,
        },
        "map_viewer": {"zoom": settings.map_viewer.zoom},
        "locator": {"server_location_available": build_locator(settings).available},
    }

from __future__ import annotations

# This module is the "orchestrator" for the place-discovery pipeline.
# It wires together:
# - the mood catalog and query builder (what to search for)
# - ingestion (caller location + Overpass POI data source)
# - normalization (raw elements -> canonical Place records)
#
# Filtering/sorting is deliberately not done here: a search result is the full normalized
# set, and views (CLI, API, session) apply `moodspot.places.filter_sort.apply` on top.

import logging
import random
from typing import Protocol

from moodspot.catalog.moods import MoodCatalog, build_mood_catalog
from moodspot.config.settings import Settings, get_settings
from moodspot.core.cancel import CancelToken, run_cancellable
from moodspot.core.time import Clock, local_clock
from moodspot.domain.models import Coordinate, SearchOutcome, SearchResult
from moodspot.features.placeholders import build_rng
from moodspot.ingestion.locator import GeoLocator, build_locator
from moodspot.ingestion.overpass_client import OverpassClient, RawElement
from moodspot.places.normalize import normalize
from moodspot.query.builder import QuerySpec, build_query, validate_radius

logger = logging.getLogger(__name__)


class PlaceDataSource(Protocol):
    async def fetch(self, spec: QuerySpec, *, cancel_token: CancelToken | None = None) -> list[RawElement]: ...


def _radius_bounds(settings: Settings) -> dict[str, int]:
    return {"min_radius_m": settings.search.min_radius_m, "max_radius_m": settings.search.max_radius_m}


async def search_places(
    mood_key: str,
    *,
    settings: Settings | None = None,
    catalog: MoodCatalog | None = None,
    locator: GeoLocator | None = None,
    data_source: PlaceDataSource | None = None,
    origin: Coordinate | None = None,
    radius_m: int | None = None,
    rng: random.Random | None = None,
    clock: Clock | None = None,
    cancel_token: CancelToken | None = None,
) -> SearchResult:
    """Run one query: locate -> build -> fetch -> normalize.

    Mood and radius are validated before any I/O, so an unknown mood never reaches the
    network. Raises the `moodspot.domain.errors` taxonomy; an empty element list is a
    successful `SearchOutcome.EMPTY` result.
    """
    settings = settings or get_settings()
    catalog = build_mood_catalog(settings) if catalog is None else catalog
    radius_m = settings.search.default_radius_m if radius_m is None else radius_m

    profile = catalog.get(mood_key)
    validate_radius(radius_m, **_radius_bounds(settings))

    if origin is None:
        locator = locator or build_locator(settings)
        origin = await run_cancellable(locator.locate(), cancel_token)

    spec = build_query(
        profile.key,
        origin,
        radius_m,
        catalog=catalog,
        tag_key=settings.overpass.tag_key,
        **_radius_bounds(settings),
    )

    data_source = data_source or OverpassClient(settings)
    elements = await data_source.fetch(spec, cancel_token=cancel_token)
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()

    clock = clock or local_clock(settings.app.timezone)
    rng = rng or build_rng(settings.placeholders.seed)
    places = normalize(
        elements,
        origin,
        rng=rng,
        hour=clock().hour,
        category_key=settings.overpass.tag_key,
    )
    logger.info("Mood %s: %d places from %d elements", profile.key, len(places), len(elements))

    if not places:
        return SearchResult(
            mood=profile.key,
            origin=origin,
            radius_m=radius_m,
            outcome=SearchOutcome.EMPTY,
            message=settings.search.empty_message,
            meta={"elements": len(elements)},
        )
    return SearchResult(
        mood=profile.key,
        origin=origin,
        radius_m=radius_m,
        outcome=SearchOutcome.SUCCESS,
        places=tuple(places),
        meta={"elements": len(elements)},
    )

"""
MoodSpot CLI entrypoint.

This CLI is intended for quick local use without a frontend.
It delegates all search logic to `moodspot.search.session.SearchSession`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from moodspot.catalog.moods import MoodCatalog, build_mood_catalog, load_mood_catalog
from moodspot.config.settings import Settings, get_settings
from moodspot.core.logging import configure_logging
from moodspot.core.maps import viewer_url
from moodspot.domain.errors import MoodSpotError
from moodspot.domain.models import Coordinate, Place
from moodspot.features.placeholders import build_rng
from moodspot.features.pricing import price_symbol
from moodspot.ingestion.locator import build_locator
from moodspot.places.filter_sort import SORT_KEYS
from moodspot.search.session import SearchSession, SearchState


def _catalog(settings: Settings, args: argparse.Namespace) -> MoodCatalog:
    if getattr(args, "moods_file", None):
        return load_mood_catalog(args.moods_file)
    return build_mood_catalog(settings)


def _origin_from_args(args: argparse.Namespace) -> Coordinate | None:
    if args.lat is None and args.lng is None:
        return None
    if args.lat is None or args.lng is None:
        raise ValueError("--lat and --lng must be given together")
    return Coordinate(lat=float(args.lat), lng=float(args.lng))


def _format_place(i: int, place: Place, settings: Settings) -> list[str]:
    status = "open" if place.is_open_now else "closed"
    lines = [
        f"{i:>2}. {place.name}  {price_symbol(place.price_tier)}  "
        f"{place.rating:.1f}* ({place.review_count})  {place.distance_km:.2f} km  {status}",
        f"    {place.category} / {place.cuisine} - {place.address}",
    ]
    if place.contact_phone:
        lines.append(f"    phone: {place.contact_phone}")
    if place.contact_website:
        lines.append(f"    web: {place.contact_website}")
    cfg = settings.map_viewer
    lines.append(f"    map: {viewer_url(place.location, zoom=cfg.zoom, base_url=cfg.base_url)}")
    return lines


def _cmd_moods(args: argparse.Namespace) -> int:
    """Handle the `moods` subcommand."""
    settings = get_settings()
    catalog = _catalog(settings, args)
    if args.json:
        print(json.dumps([p.model_dump(mode="json") for p in catalog], ensure_ascii=False, indent=2))
        return 0
    for profile in catalog:
        print(f"{profile.key:<12} {profile.label}  [{', '.join(profile.category_tags)}]  {profile.description}")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    """Handle the `search` subcommand."""
    settings = get_settings()
    origin = _origin_from_args(args)
    seed = args.seed if args.seed is not None else settings.placeholders.seed

    session = SearchSession(
        settings=settings,
        catalog=_catalog(settings, args),
        locator=build_locator(settings, override=origin),
        rng=build_rng(seed),
    )
    asyncio.run(session.search(args.mood, radius_m=args.radius))

    if session.state is SearchState.ERROR:
        print(f"Error: {session.message}", file=sys.stderr)
        return 1

    places = session.view(
        price_tiers=args.price or None,
        min_rating=float(args.min_rating),
        sort_key=args.sort,
    )
    result = session.result

    if args.json:
        payload = {
            "mood": result.mood,
            "origin": result.origin.model_dump(mode="json"),
            "radius_m": result.radius_m,
            "outcome": result.outcome.value,
            "message": result.message,
            "total_found": len(result.places),
            "places": [p.model_dump(mode="json") for p in places],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    if session.message:
        print(session.message)
        return 0

    print(
        f"{len(places)} of {len(result.places)} places for '{result.mood}' within {result.radius_m} m "
        f"of {result.origin.lat:.5f},{result.origin.lng:.5f}"
    )
    for i, place in enumerate(places, start=1):
        for line in _format_place(i, place, settings):
            print(line)
    return 0


def _cmd_map_url(args: argparse.Namespace) -> int:
    cfg = get_settings().map_viewer
    zoom = args.zoom if args.zoom is not None else cfg.zoom
    print(viewer_url(Coordinate(lat=args.lat, lng=args.lng), zoom=zoom, base_url=cfg.base_url))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the MoodSpot CLI."""
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="moodspot")
    parser.add_argument("--log-level", type=str, default=None, help="Override MOODSPOT_LOG_LEVEL for this run.")
    sub = parser.add_subparsers(dest="command", required=True)

    moods = sub.add_parser("moods", help="List the configured moods.")
    moods.add_argument("--moods-file", type=str, default=None, help="JSON mood catalog to use instead of settings.")
    moods.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    moods.set_defaults(func=_cmd_moods)

    search = sub.add_parser("search", help="Find places nearby that match a mood.")
    search.add_argument("--mood", required=True, help="Mood key (see `moodspot moods`).")
    search.add_argument("--lat", type=float, default=None, help="Origin latitude (default: configured locator).")
    search.add_argument("--lng", type=float, default=None, help="Origin longitude (default: configured locator).")
    search.add_argument(
        "--radius",
        type=int,
        default=settings.search.default_radius_m,
        help=f"Search radius in meters ({settings.search.min_radius_m}..{settings.search.max_radius_m}).",
    )
    search.add_argument(
        "--price",
        type=int,
        action="append",
        default=[],
        choices=[1, 2, 3, 4],
        help="Repeatable. Keep only these price tiers (default: all).",
    )
    search.add_argument("--min-rating", type=float, default=0.0, help="Minimum rating (0..5).")
    search.add_argument("--sort", type=str, default=settings.search.default_sort, choices=list(SORT_KEYS))
    search.add_argument("--seed", type=int, default=None, help="Seed for placeholder ratings.")
    search.add_argument("--moods-file", type=str, default=None, help="JSON mood catalog to use instead of settings.")
    search.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    search.set_defaults(func=_cmd_search)

    m = sub.add_parser("map-url", help="Print the map viewer URL for a coordinate.")
    m.add_argument("--lat", required=True, type=float)
    m.add_argument("--lng", required=True, type=float)
    m.add_argument("--zoom", type=int, default=None)
    m.set_defaults(func=_cmd_map_url)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m moodspot.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (MoodSpotError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

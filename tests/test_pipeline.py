import random
from datetime import datetime

import pytest

from moodspot.config.settings import get_settings
from moodspot.domain.errors import InvalidRadius, LocationDenied, LocationUnavailable, NetworkError, UnknownMood
from moodspot.domain.models import Coordinate, SearchOutcome
from moodspot.ingestion.locator import FixedLocationProvider, GeoLocator
from moodspot.ingestion.overpass_client import OverpassClient, parse_elements
from moodspot.places import filter_sort
from moodspot.search.pipeline import search_places

ORIGIN = Coordinate(lat=40.0, lng=-75.0)


class StubDataSource:
    def __init__(self, payload=None, exc=None):
        self.payload = payload if payload is not None else {"elements": []}
        self.exc = exc
        self.specs = []

    async def fetch(self, spec, *, cancel_token=None):
        self.specs.append(spec)
        if self.exc is not None:
            raise self.exc
        return parse_elements(self.payload)


class DenyingProvider:
    name = "denying"

    async def current_position(self):
        raise PermissionError("user said no")


def _noon():
    return datetime(2026, 1, 5, 12, 0)


BLUE_CAFE_PAYLOAD = {
    "elements": [
        {"type": "node", "id": 101, "lat": 40.001, "lon": -75.001, "tags": {"name": "Blue Cafe", "amenity": "cafe"}},
        {"type": "node", "id": 102, "lat": 40.002, "lon": -75.002, "tags": {"amenity": "cafe"}},
    ]
}


@pytest.mark.asyncio
async def test_blue_cafe_end_to_end():
    source = StubDataSource(BLUE_CAFE_PAYLOAD)
    result = await search_places(
        "work",
        settings=get_settings(),
        locator=GeoLocator(FixedLocationProvider(ORIGIN)),
        data_source=source,
        radius_m=2000,
        rng=random.Random(1),
        clock=_noon,
    )

    assert result.outcome is SearchOutcome.SUCCESS
    assert [p.name for p in result.places] == ["Blue Cafe"]
    place = result.places[0]
    assert place.distance_km > 0
    assert place.is_open_now is True
    assert result.origin == ORIGIN

    assert source.specs[0].category_tags == ("cafe", "coworking_space", "library")
    assert source.specs[0].radius_m == 2000

    ordered = filter_sort.apply(result.places, sort_key="distance")
    assert ordered == list(result.places)


@pytest.mark.asyncio
async def test_unknown_mood_fails_without_network_call(monkeypatch):
    calls = []

    async def fake_post_text(*args, **kwargs):
        calls.append((args, kwargs))
        return {"elements": []}

    monkeypatch.setattr("moodspot.ingestion.overpass_client.post_text", fake_post_text)
    settings = get_settings()

    with pytest.raises(UnknownMood):
        await search_places("vacation", settings=settings, origin=ORIGIN, data_source=OverpassClient(settings))
    assert calls == []


@pytest.mark.asyncio
async def test_unknown_mood_is_checked_before_locating():
    with pytest.raises(UnknownMood):
        await search_places("vacation", settings=get_settings(), locator=GeoLocator(None))


@pytest.mark.asyncio
async def test_invalid_radius_fails_before_fetch():
    source = StubDataSource()
    with pytest.raises(InvalidRadius):
        await search_places("work", settings=get_settings(), origin=ORIGIN, data_source=source, radius_m=6000)
    assert source.specs == []


@pytest.mark.asyncio
async def test_empty_elements_is_empty_outcome_not_error():
    settings = get_settings()
    result = await search_places("date", settings=settings, origin=ORIGIN, data_source=StubDataSource())
    assert result.outcome is SearchOutcome.EMPTY
    assert result.places == ()
    assert result.message == settings.search.empty_message


@pytest.mark.asyncio
async def test_only_unusable_elements_is_empty_outcome():
    payload = {"elements": [{"type": "node", "id": 1, "tags": {"name": "No location"}}]}
    result = await search_places("date", settings=get_settings(), origin=ORIGIN, data_source=StubDataSource(payload))
    assert result.outcome is SearchOutcome.EMPTY
    assert result.meta["elements"] == 1


@pytest.mark.asyncio
async def test_network_error_propagates():
    source = StubDataSource(exc=NetworkError("Failed to fetch places data (HTTP 504)"))
    with pytest.raises(NetworkError, match="504"):
        await search_places("budget", settings=get_settings(), origin=ORIGIN, data_source=source)


@pytest.mark.asyncio
async def test_missing_location_capability():
    with pytest.raises(LocationUnavailable):
        await search_places("work", settings=get_settings(), locator=GeoLocator(None), data_source=StubDataSource())


@pytest.mark.asyncio
async def test_denied_location():
    source = StubDataSource()
    with pytest.raises(LocationDenied, match="enable location access"):
        await search_places("work", settings=get_settings(), locator=GeoLocator(DenyingProvider()), data_source=source)
    assert source.specs == []


@pytest.mark.asyncio
async def test_default_radius_comes_from_settings():
    settings = get_settings()
    source = StubDataSource()
    result = await search_places("work", settings=settings, origin=ORIGIN, data_source=source)
    assert result.radius_m == settings.search.default_radius_m
    assert source.specs[0].radius_m == settings.search.default_radius_m

import asyncio

import httpx
import pytest

from moodspot.catalog.moods import build_mood_catalog
from moodspot.config.settings import get_settings
from moodspot.core.cancel import CancelToken
from moodspot.core.ingestion_meta import capture_ingestion_meta
from moodspot.domain.errors import NetworkError, QueryCancelled
from moodspot.domain.models import Coordinate
from moodspot.ingestion.overpass_client import OverpassClient, parse_elements
from moodspot.query.builder import build_query


def _spec():
    settings = get_settings()
    return build_query("work", Coordinate(lat=40.0, lng=-75.0), 2000, catalog=build_mood_catalog(settings))


def _status_error(url, status):
    request = httpx.Request("POST", url)
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(str(status), request=request, response=response)


@pytest.mark.asyncio
async def test_fetch_posts_query_text_and_parses_elements(monkeypatch):
    calls = []

    async def fake_post_text(url, *, body, content_type, headers=None, timeout_seconds=15):  # noqa: ARG001
        calls.append((url, body, content_type, timeout_seconds))
        return {
            "elements": [
                {"type": "node", "id": 1, "lat": 40.001, "lon": -75.001, "tags": {"name": "Blue Cafe", "amenity": "cafe"}},
                {"type": "way", "id": 2, "center": {"lat": 40.002, "lon": -75.002}, "tags": {"amenity": "library"}},
                "garbage",
                {"type": "node", "lat": 1, "lon": 2},
            ]
        }

    monkeypatch.setattr("moodspot.ingestion.overpass_client.post_text", fake_post_text)

    settings = get_settings()
    with capture_ingestion_meta() as meta:
        elements = await OverpassClient(settings).fetch(_spec())

    assert [e.id for e in elements] == [1, 2]
    assert elements[0].tags["name"] == "Blue Cafe"
    assert elements[1].center_lat == 40.002 and elements[1].lat is None

    url, body, content_type, timeout = calls[0]
    assert url == settings.overpass.base_url
    assert content_type == "application/x-www-form-urlencoded"
    assert timeout is None
    assert body.startswith("[out:json][timeout:25];")
    assert 'node["amenity"="cafe"](around:2000,40.0,-75.0);' in body

    assert meta.overpass["mode"] == "live"
    assert meta.overpass["elements"] == 2


@pytest.mark.asyncio
async def test_empty_elements_is_a_valid_result(monkeypatch):
    async def fake_post_text(*_args, **_kwargs):
        return {"version": 0.6, "elements": []}

    monkeypatch.setattr("moodspot.ingestion.overpass_client.post_text", fake_post_text)
    assert await OverpassClient(get_settings()).fetch(_spec()) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 429, 500, 504])
async def test_non_success_status_is_network_error(monkeypatch, status):
    async def fake_post_text(url, **_kwargs):
        raise _status_error(url, status)

    monkeypatch.setattr("moodspot.ingestion.overpass_client.post_text", fake_post_text)
    with pytest.raises(NetworkError, match=f"HTTP {status}"):
        await OverpassClient(get_settings()).fetch(_spec())


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectError("boom"),
        httpx.ReadTimeout("slow"),
        ValueError("Expecting value: line 1 column 1 (char 0)"),
    ],
)
async def test_transport_and_body_failures_are_network_errors(monkeypatch, exc):
    async def fake_post_text(*_args, **_kwargs):
        raise exc

    monkeypatch.setattr("moodspot.ingestion.overpass_client.post_text", fake_post_text)
    with pytest.raises(NetworkError):
        await OverpassClient(get_settings()).fetch(_spec())


@pytest.mark.parametrize("payload", [[], {"remark": "runtime error"}, {"elements": {}}, None])
def test_malformed_body_is_network_error(payload):
    with pytest.raises(NetworkError, match="Malformed"):
        parse_elements(payload)


@pytest.mark.parametrize(
    "remark",
    [
        "runtime error: Query timed out in \"query\" at line 1 after 25 seconds.",
        "  Runtime error: Query run out of memory using about 2048 MB of RAM.",
    ],
)
def test_runtime_error_remark_is_network_error(remark):
    payload = {"elements": [{"type": "node", "id": 1, "lat": 1.0, "lon": 2.0, "tags": {"name": "Partial"}}], "remark": remark}
    with pytest.raises(NetworkError, match="query failed"):
        parse_elements(payload)


def test_other_remarks_are_not_errors():
    payload = {"elements": [], "remark": "Note: the query was answered from a slightly stale database."}
    assert parse_elements(payload) == []


@pytest.mark.asyncio
async def test_expired_server_query_is_not_an_empty_result(monkeypatch):
    async def fake_post_text(*_args, **_kwargs):
        return {"elements": [], "remark": "runtime error: Query timed out in \"query\" at line 1 after 25 seconds."}

    monkeypatch.setattr("moodspot.ingestion.overpass_client.post_text", fake_post_text)
    with capture_ingestion_meta() as meta:
        with pytest.raises(NetworkError, match="timed out"):
            await OverpassClient(get_settings()).fetch(_spec())
    assert meta.overpass == {"mode": "none", "error": "bad_response"}


def test_parse_elements_tolerates_odd_values():
    elements = parse_elements(
        {"elements": [{"id": 7, "lat": "40.5", "lon": None, "tags": {"name": "X", "fee": None}}]}
    )
    assert elements[0].lat == 40.5
    assert elements[0].lon is None
    assert dict(elements[0].tags) == {"name": "X"}


@pytest.mark.asyncio
async def test_cancelled_fetch_is_abandoned(monkeypatch):
    started = asyncio.Event()

    async def never_returns(*_args, **_kwargs):
        started.set()
        await asyncio.Event().wait()

    monkeypatch.setattr("moodspot.ingestion.overpass_client.post_text", never_returns)

    token = CancelToken()
    task = asyncio.create_task(OverpassClient(get_settings()).fetch(_spec(), cancel_token=token))
    await started.wait()
    token.cancel()

    with pytest.raises(QueryCancelled):
        await task

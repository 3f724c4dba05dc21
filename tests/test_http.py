import json

import httpx
import pytest

from moodspot.core import http


def _mock_client(monkeypatch, handler):
    """Route every `httpx.AsyncClient` built by `moodspot.core.http` through `handler`."""
    real_client = httpx.AsyncClient
    seen = []

    def recording(request):
        seen.append(request)
        return handler(request)

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(recording), **kwargs)

    monkeypatch.setattr(http.httpx, "AsyncClient", factory)
    return seen


@pytest.mark.asyncio
async def test_post_text_sends_one_raw_body_post(monkeypatch):
    seen = _mock_client(monkeypatch, lambda request: httpx.Response(200, json={"elements": []}))
    query = '[out:json][timeout:25];(node["amenity"="cafe"](around:2000,40.0,-75.0););out center;'

    data = await http.post_text(
        "https://overpass.test/api/interpreter",
        body=query,
        content_type="application/x-www-form-urlencoded",
        timeout_seconds=None,
    )

    assert data == {"elements": []}
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://overpass.test/api/interpreter"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.headers["User-Agent"] == http.DEFAULT_USER_AGENT
    assert request.content == query.encode("utf-8")


@pytest.mark.asyncio
async def test_post_text_headers_override_default_user_agent(monkeypatch):
    seen = _mock_client(monkeypatch, lambda request: httpx.Response(200, json={}))
    await http.post_text("https://overpass.test/", body="x", headers={"User-Agent": "custom/1.0"})
    assert seen[0].headers["User-Agent"] == "custom/1.0"


@pytest.mark.asyncio
async def test_post_text_raises_on_server_error(monkeypatch):
    _mock_client(monkeypatch, lambda request: httpx.Response(500, text="busy"))
    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        await http.post_text("https://overpass.test/", body="x")
    assert excinfo.value.response.status_code == 500


@pytest.mark.asyncio
async def test_post_text_rejects_non_json_body(monkeypatch):
    _mock_client(monkeypatch, lambda request: httpx.Response(200, text="<html>rate limited</html>"))
    with pytest.raises(ValueError):
        await http.post_text("https://overpass.test/", body="x")


@pytest.mark.asyncio
async def test_get_json_passes_params_and_decodes(monkeypatch):
    seen = _mock_client(monkeypatch, lambda request: httpx.Response(200, content=json.dumps({"lat": 1.5, "lon": 2.5})))

    data = await http.get_json("https://ip.test/json", params={"fields": "lat,lon"})

    assert data == {"lat": 1.5, "lon": 2.5}
    assert seen[0].method == "GET"
    assert seen[0].url.params["fields"] == "lat,lon"

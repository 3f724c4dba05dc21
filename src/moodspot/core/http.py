"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by ingestion clients.

Design goals:
- Small surface area (GET JSON, POST a text body).
- Deterministic defaults (User-Agent).
- Raise on non-2xx so callers decide how to translate failures.
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "moodspot/0.1.0 (+https://local)"


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float | None = 15,
) -> Any:
    """GET `url` and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)

    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        resp = await client.get(url, params=params, headers=request_headers)
        resp.raise_for_status()
        return resp.json()


async def post_text(
    url: str,
    *,
    body: str,
    content_type: str = "application/x-www-form-urlencoded",
    headers: dict[str, str] | None = None,
    timeout_seconds: float | None = 15,
) -> Any:
    """POST a raw text `body` and return the decoded JSON response.

    Used by the Overpass client, whose interpreter endpoint takes the query as the request body.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT, "Content-Type": content_type}
    if headers:
        request_headers.update(headers)

    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        resp = await client.post(url, content=body.encode("utf-8"), headers=request_headers)
        resp.raise_for_status()
        return resp.json()

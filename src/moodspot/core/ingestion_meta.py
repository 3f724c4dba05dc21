"""
Per-search record of where the inputs came from.

A search has exactly two inputs from the outside world:
- the origin (caller supplied, a configured/fixed provider, an IP lookup, or nothing),
- the Overpass fetch (live with element count and latency, or failed with an error code).

The locator and the Overpass client report into a contextvar-scoped `IngestionMeta`;
outside `capture_ingestion_meta()` reports are dropped. The API returns the record as
the response `meta.freshness`.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator


@dataclass
class IngestionMeta:
    # {"mode": "request" | "live" | "none", "provider"?: str}
    location: dict[str, Any] | None = None
    # {"mode": "live", "elements", "elapsed_ms", "url"} or {"mode": "none", "error"}
    overpass: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, dict[str, Any]]:
        """Only the inputs that were actually recorded."""
        out: dict[str, dict[str, Any]] = {}
        if self.location is not None:
            out["location"] = dict(self.location)
        if self.overpass is not None:
            out["overpass"] = dict(self.overpass)
        return out


_current: contextvars.ContextVar[IngestionMeta | None] = contextvars.ContextVar(
    "moodspot_ingestion_meta", default=None
)


def record_location(mode: str, **details: Any) -> None:
    meta = _current.get()
    if meta is not None:
        meta.location = {"mode": mode, **details}


def record_fetch(mode: str, **details: Any) -> None:
    meta = _current.get()
    if meta is not None:
        meta.overpass = {"mode": mode, **details}


@contextmanager
def capture_ingestion_meta() -> Iterator[IngestionMeta]:
    meta = IngestionMeta()
    token = _current.set(meta)
    try:
        yield meta
    finally:
        _current.reset(token)

"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- catalog entries (`MoodProfile`)
- canonical place records (`Place`) built from raw OpenStreetMap elements
- API/CLI inputs and outputs (`SearchRequest`, `SearchResult`)

Place-level models are frozen: a query builds them once and a new query replaces the
whole set rather than editing entries in place.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class MoodProfile(BaseModel):
    """Query profile for one mood: which POI categories it searches."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    category_tags: tuple[str, ...]
    description: str = ""

    @field_validator("category_tags")
    @classmethod
    def _unique_tags(cls, tags: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = [t.strip() for t in tags if t and t.strip()]
        if not cleaned:
            raise ValueError("category_tags must contain at least one tag")
        return tuple(dict.fromkeys(cleaned))


class Place(BaseModel):
    """A named, located POI ready for display."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    address: str
    rating: float = Field(..., ge=3.5, le=5.0)
    review_count: int = Field(..., ge=20, lt=520)
    price_tier: int = Field(..., ge=1, le=4)
    distance_km: float = Field(..., ge=0)
    is_open_now: bool
    location: Coordinate
    category: str
    cuisine: str = "Various"
    contact_phone: str | None = None
    contact_website: str | None = None

    osm_type: str | None = None
    osm_id: int | None = None


class SearchOutcome(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"


class SearchResult(BaseModel):
    """Normalized (unfiltered) places for one query plus how the query ended."""

    model_config = ConfigDict(frozen=True)

    mood: str
    origin: Coordinate
    radius_m: int
    outcome: SearchOutcome
    places: tuple[Place, ...] = ()
    message: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


class SearchRequest(BaseModel):
    """End-user request payload for a search run (API)."""

    mood: str
    origin: Coordinate | None = None
    radius_m: int | None = None
    price_tiers: list[int] = Field(default_factory=lambda: [1, 2, 3, 4])
    min_rating: float = Field(0.0, ge=0, le=5)
    sort: str | None = None

    @field_validator("price_tiers")
    @classmethod
    def _validate_tiers(cls, tiers: list[int]) -> list[int]:
        bad = [t for t in tiers if t not in (1, 2, 3, 4)]
        if bad:
            raise ValueError(f"price_tiers must be within 1..4, got {bad}")
        return sorted(set(tiers))


class SearchResponse(BaseModel):
    """Filtered + sorted API response."""

    mood: str
    origin: Coordinate
    radius_m: int
    outcome: SearchOutcome
    message: str | None = None
    total_found: int
    places: list[Place]
    meta: dict[str, Any] = Field(default_factory=dict)

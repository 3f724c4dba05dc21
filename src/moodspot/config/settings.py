# src/moodspot/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/moodspot/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `MOODSPOT_LOG_LEVEL`, `MOODSPOT_LOCATION`)
- an external YAML file via `MOODSPOT_CONFIG_PATH`

Design rule:
- Tuning knobs (mood catalog, radius bounds, Overpass endpoint) live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from moodspot.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `moodspot.config`."""
    text = resources.files("moodspot.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "MoodSpot"
    # None means "use the host's local timezone" for open/closed derivation.
    timezone: str | None = None
    log_level: str = "INFO"


class OverpassSettings(BaseModel):
    base_url: str = "https://overpass-api.de/api/interpreter"
    tag_key: str = "amenity"
    query_timeout_seconds: int = Field(25, ge=1)
    # Client-side timeout; None leaves the wait to the server-side query timeout.
    http_timeout_seconds: float | None = None
    user_agent: str = "moodspot/0.1.0 (+https://local)"


class SearchSettings(BaseModel):
    min_radius_m: int = Field(500, ge=1)
    max_radius_m: int = Field(5000, ge=1)
    radius_step_m: int = Field(500, ge=1)
    default_radius_m: int = 2000
    default_sort: str = "distance"
    min_rating_step: float = Field(0.5, gt=0)
    empty_message: str = (
        "No places found nearby. Try increasing the search radius or selecting a different mood."
    )

    @model_validator(mode="after")
    def _validate_bounds(self) -> "SearchSettings":
        if self.max_radius_m < self.min_radius_m:
            raise ValueError("search.max_radius_m must be >= search.min_radius_m")
        if not self.min_radius_m <= self.default_radius_m <= self.max_radius_m:
            raise ValueError("search.default_radius_m must lie within the radius bounds")
        return self


class FixedLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class LocatorSettings(BaseModel):
    fixed: FixedLocation | None = None
    ip_lookup_url: str | None = None
    http_timeout_seconds: float = 10


class MapViewerSettings(BaseModel):
    base_url: str = "https://www.openstreetmap.org/"
    zoom: int = Field(18, ge=0, le=19)


class PlaceholderSettings(BaseModel):
    # Seed for synthesized rating/review counts; None draws a fresh sequence per run.
    seed: int | None = None


class MoodDefinition(BaseModel):
    label: str
    category_tags: list[str] = Field(default_factory=list)
    description: str = ""


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    overpass: OverpassSettings = Field(default_factory=OverpassSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    locator: LocatorSettings = Field(default_factory=LocatorSettings)
    map_viewer: MapViewerSettings = Field(default_factory=MapViewerSettings)
    placeholders: PlaceholderSettings = Field(default_factory=PlaceholderSettings)
    moods: dict[str, MoodDefinition] = Field(default_factory=dict)


def _parse_location(value: str) -> dict[str, float]:
    """Parse a `lat,lng` pair from the environment."""
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 2:
        raise ValueError(f"MOODSPOT_LOCATION must be 'lat,lng', got {value!r}")
    return {"lat": float(parts[0]), "lng": float(parts[1])}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("MOODSPOT_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    timezone = os.getenv("MOODSPOT_TIMEZONE")
    if timezone:
        data.setdefault("app", {})["timezone"] = timezone

    overpass_url = os.getenv("MOODSPOT_OVERPASS_URL")
    if overpass_url:
        data.setdefault("overpass", {})["base_url"] = overpass_url

    location = os.getenv("MOODSPOT_LOCATION")
    if location:
        data.setdefault("locator", {})["fixed"] = _parse_location(location)

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("MOODSPOT_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")

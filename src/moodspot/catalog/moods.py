"""
Mood catalog.

The catalog maps a mood key (e.g. `work`) to the OpenStreetMap categories it searches.
It is loaded once from settings (`moods:` in `defaults.yaml`) and validated into typed
`MoodProfile` models, so the query builder can assume a consistent shape.

The catalog is passed explicitly to the query builder instead of being read from a
global, which lets tests supply their own moods.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, Mapping

from pydantic import TypeAdapter

from moodspot.config.settings import Settings, get_settings
from moodspot.core.env import resolve_project_path
from moodspot.domain.errors import UnknownMood
from moodspot.domain.models import MoodProfile


_PROFILES_ADAPTER = TypeAdapter(list[MoodProfile])


class MoodCatalog:
    """Immutable registry of mood profiles, keyed by mood key (insertion ordered)."""

    def __init__(self, profiles: list[MoodProfile]):
        registry: dict[str, MoodProfile] = {}
        for profile in profiles:
            if profile.key in registry:
                raise ValueError(f"Duplicate mood key '{profile.key}'")
            registry[profile.key] = profile
        self._profiles = registry

    def get(self, key: str) -> MoodProfile:
        """Return the profile for `key` or raise `UnknownMood`."""
        try:
            return self._profiles[key]
        except KeyError:
            raise UnknownMood(key, known=self.keys()) from None

    def keys(self) -> list[str]:
        return list(self._profiles)

    def __contains__(self, key: object) -> bool:
        return key in self._profiles

    def __iter__(self) -> Iterator[MoodProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)


def catalog_from_mapping(moods: Mapping[str, Any]) -> MoodCatalog:
    """Build a catalog from a `{key: {label, category_tags, description}}` mapping."""
    payload = []
    for key, definition in moods.items():
        if hasattr(definition, "model_dump"):
            definition = definition.model_dump(mode="python")
        payload.append({"key": key, **dict(definition)})
    return MoodCatalog(_PROFILES_ADAPTER.validate_python(payload))


def load_mood_catalog(path: str | Path) -> MoodCatalog:
    """Load a catalog from a JSON file (list of profiles or key -> profile mapping)."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        return catalog_from_mapping(payload)
    return MoodCatalog(_PROFILES_ADAPTER.validate_python(payload))


def build_mood_catalog(settings: Settings) -> MoodCatalog:
    """Build the catalog configured in `settings.moods`."""
    return catalog_from_mapping(settings.moods)


@lru_cache
def get_mood_catalog() -> MoodCatalog:
    """Process-wide catalog from the default settings (cached)."""
    return build_mood_catalog(get_settings())

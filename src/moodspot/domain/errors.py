"""
Error taxonomy for the place-discovery pipeline.

Every failure that ends a query derives from `MoodSpotError` and carries a message
that can be shown to the user as-is. An empty result set is not an error; see
`moodspot.domain.models.SearchOutcome.EMPTY`.
"""

from __future__ import annotations


class MoodSpotError(Exception):
    """Base class for query-terminating failures."""

    code = "MOODSPOT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LocationUnavailable(MoodSpotError):
    """The host has no way to determine the caller's position."""

    code = "LOCATION_UNAVAILABLE"


class LocationDenied(MoodSpotError):
    """A location provider exists but declined or failed the request."""

    code = "LOCATION_DENIED"


class UnknownMood(MoodSpotError):
    """The requested mood key is not registered in the catalog."""

    code = "UNKNOWN_MOOD"

    def __init__(self, mood_key: str, known: list[str] | None = None):
        known_txt = f" (known moods: {', '.join(known)})" if known else ""
        super().__init__(f"Unknown mood '{mood_key}'{known_txt}")
        self.mood_key = mood_key


class InvalidRadius(MoodSpotError, ValueError):
    """Search radius outside the supported bounds."""

    code = "INVALID_RADIUS"


class NetworkError(MoodSpotError):
    """The POI data source could not be reached or returned an unusable response."""

    code = "NETWORK_ERROR"


class QueryCancelled(MoodSpotError):
    """The query was superseded by a newer one and abandoned."""

    code = "QUERY_CANCELLED"

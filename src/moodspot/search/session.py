"""
Search session: the explicit loading/error state machine behind a results view.

A session owns the single "current result set". Each `search()`:
- validates mood + radius up front; a rejected request raises and leaves the session as it was,
- cancels the previous in-flight query (last query wins),
- clears the previous places and moves to LOADING,
- ends in SUCCESS (places, possibly empty) or ERROR (human-readable message).

A superseded query never touches the session when it finally resolves.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable, Iterable

from moodspot.catalog.moods import MoodCatalog, build_mood_catalog
from moodspot.config.settings import Settings, get_settings
from moodspot.core.cancel import CancelToken
from moodspot.core.time import Clock
from moodspot.domain.errors import MoodSpotError, QueryCancelled
from moodspot.domain.models import Coordinate, Place, SearchOutcome, SearchResult
from moodspot.ingestion.locator import GeoLocator
from moodspot.places import filter_sort
from moodspot.query.builder import validate_radius
from moodspot.search.pipeline import PlaceDataSource, search_places

logger = logging.getLogger(__name__)


class SearchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


ALLOWED_TRANSITIONS: dict[SearchState, frozenset[SearchState]] = {
    SearchState.IDLE: frozenset({SearchState.LOADING}),
    SearchState.LOADING: frozenset(
        {SearchState.LOADING, SearchState.SUCCESS, SearchState.ERROR, SearchState.IDLE}
    ),
    SearchState.SUCCESS: frozenset({SearchState.LOADING}),
    SearchState.ERROR: frozenset({SearchState.LOADING}),
}

StateListener = Callable[[SearchState, "SearchSession"], None]


class InvalidTransition(RuntimeError):
    pass


class SearchSession:
    """Holds the current query, its state and its result set."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        catalog: MoodCatalog | None = None,
        locator: GeoLocator | None = None,
        data_source: PlaceDataSource | None = None,
        rng: random.Random | None = None,
        clock: Clock | None = None,
    ):
        self._settings = settings or get_settings()
        self._catalog = build_mood_catalog(self._settings) if catalog is None else catalog
        self._locator = locator
        self._data_source = data_source
        self._rng = rng
        self._clock = clock

        self._state = SearchState.IDLE
        self._token: CancelToken | None = None
        self._result: SearchResult | None = None
        self._error: MoodSpotError | None = None
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def result(self) -> SearchResult | None:
        return self._result

    @property
    def places(self) -> tuple[Place, ...]:
        return self._result.places if self._result else ()

    @property
    def error(self) -> MoodSpotError | None:
        return self._error

    @property
    def message(self) -> str | None:
        """User-facing message for the current state (error text or the 'no matches' hint)."""
        if self._error is not None:
            return self._error.message
        if self._result is not None and self._result.outcome is SearchOutcome.EMPTY:
            return self._result.message
        return None

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _transition(self, new_state: SearchState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self._state]:
            raise InvalidTransition(f"Cannot move from {self._state.value} to {new_state.value}")
        logger.debug("Search state %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state, self)

    async def search(
        self,
        mood_key: str,
        *,
        origin: Coordinate | None = None,
        radius_m: int | None = None,
    ) -> SearchResult | None:
        """Run a query for `mood_key`; returns its result, or None if it failed or was superseded."""
        self._catalog.get(mood_key)
        if radius_m is not None:
            validate_radius(
                radius_m,
                min_radius_m=self._settings.search.min_radius_m,
                max_radius_m=self._settings.search.max_radius_m,
            )

        if self._token is not None:
            self._token.cancel("superseded")
        token = CancelToken()
        self._token = token

        self._result = None
        self._error = None
        self._transition(SearchState.LOADING)

        try:
            result = await search_places(
                mood_key,
                settings=self._settings,
                catalog=self._catalog,
                locator=self._locator,
                data_source=self._data_source,
                origin=origin,
                radius_m=radius_m,
                rng=self._rng,
                clock=self._clock,
                cancel_token=token,
            )
        except QueryCancelled:
            logger.debug("Query for mood %s superseded", mood_key)
            return None
        except MoodSpotError as e:
            if token is not self._token:
                return None
            self._error = e
            self._transition(SearchState.ERROR)
            return None
        except Exception as e:
            if token is self._token:
                self._error = MoodSpotError(f"Failed to fetch places. Please try again. ({type(e).__name__})")
                self._transition(SearchState.ERROR)
            raise

        if token is not self._token:
            return None
        self._result = result
        self._transition(SearchState.SUCCESS)
        return result

    def cancel(self) -> None:
        """Abandon the in-flight query, if any, and return to IDLE."""
        if self._state is not SearchState.LOADING:
            return
        if self._token is not None:
            self._token.cancel("cancelled by caller")
        self._token = None
        self._transition(SearchState.IDLE)

    def view(
        self,
        *,
        price_tiers: Iterable[int] | None = None,
        min_rating: float = 0.0,
        sort_key: str | None = None,
    ) -> list[Place]:
        """Filtered + sorted view of the current result set."""
        return filter_sort.apply(
            self.places,
            price_tiers=price_tiers,
            min_rating=min_rating,
            sort_key=sort_key if sort_key is not None else self._settings.search.default_sort,
        )

"""Per-view loading/error/data state for the catalog and detail screens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from fastapi.concurrency import run_in_threadpool

from movie_discovery.services.models import MovieDetail, MovieSummary
from movie_discovery.services.navigation import NavigationState, View
from movie_discovery.services.tmdb import TMDbConfigurationError, TMDbError


logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "TMDb API Key is missing. Please set TMDB_API_KEY in your .env file."


class CatalogSource(Protocol):
    def search(self, query: str | None = None) -> list[MovieSummary]: ...

    def fetch_detail(self, movie_id: int) -> MovieDetail: ...


def describe_error(exc: TMDbError, *, action: str) -> str:
    """Turn a TMDb failure into the message shown in the view."""

    if isinstance(exc, TMDbConfigurationError):
        return MISSING_KEY_MESSAGE
    return (
        f"Failed to {action}: {exc.message}. "
        "Please check your API key and internet connection."
    )


@dataclass(slots=True)
class CatalogResult:
    """The outcome of one catalog load, independent of later loads."""

    query: str
    movies: list[MovieSummary] = field(default_factory=list)
    error: str | None = None

    def empty_message(self) -> str | None:
        if self.error or self.movies:
            return None
        if self.query:
            return f'No movies found for "{self.query}".'
        return "No trending movies available."


class CatalogPanel:
    """Trending/search results for the catalog screen.

    The panel shows the latest load. Each ``load`` also returns its own
    result, so an overlapping caller still answers for the query it asked.
    """

    def __init__(self, source: CatalogSource) -> None:
        self._source = source
        self.query = ""
        self.movies: list[MovieSummary] = []
        self.loading = False
        self.error: str | None = None
        self._generation = 0

    async def load(self, query: str = "") -> CatalogResult:
        self._generation += 1
        generation = self._generation
        result = CatalogResult(query=query.strip())
        self.query = result.query
        self.loading = True
        self.error = None
        try:
            result.movies = await run_in_threadpool(self._source.search, result.query)
        except TMDbError as exc:
            logger.error("Failed to fetch movies: %s", exc.message)
            result.error = describe_error(exc, action="load movies")
        if generation != self._generation:
            logger.debug("Discarding stale catalog result for %r", result.query)
            return result
        self.movies = result.movies
        self.error = result.error
        self.loading = False
        return result

    def empty_message(self) -> str | None:
        if self.loading:
            return None
        return CatalogResult(self.query, self.movies, self.error).empty_message()


class DetailPanel:
    """The single movie shown on the detail screen.

    Only the most recently requested id may write a result. Leaving the
    detail view resets the panel, so a fetch that completes afterwards is
    dropped.
    """

    def __init__(self, source: CatalogSource) -> None:
        self._source = source
        self.movie_id: int | None = None
        self.movie: MovieDetail | None = None
        self.loading = False
        self.error: str | None = None

    def on_navigate(self, previous: NavigationState, current: NavigationState) -> None:
        if current.view is not View.DETAIL:
            self.reset()
        elif current.movie_id != previous.movie_id or previous.view is not View.DETAIL:
            self.request(current.movie_id)

    def request(self, movie_id: int) -> None:
        self.movie_id = movie_id
        self.movie = None
        self.error = None
        self.loading = True

    def reset(self) -> None:
        self.movie_id = None
        self.movie = None
        self.error = None
        self.loading = False

    def resolve(
        self,
        movie_id: int,
        *,
        movie: MovieDetail | None = None,
        error: str | None = None,
    ) -> bool:
        """Apply a finished fetch; returns False when the result is stale."""

        if movie_id != self.movie_id or not self.loading:
            logger.debug("Discarding stale detail result for movie %s", movie_id)
            return False
        self.movie = movie
        self.error = error
        self.loading = False
        return True

    async def refresh(self) -> None:
        """Fetch the pending movie, if a request is outstanding."""

        movie_id = self.movie_id
        if movie_id is None or not self.loading:
            return
        try:
            movie = await run_in_threadpool(self._source.fetch_detail, movie_id)
        except TMDbError as exc:
            logger.error("Failed to fetch movie details for %s: %s", movie_id, exc.message)
            self.resolve(movie_id, error=describe_error(exc, action="load movie details"))
        else:
            self.resolve(movie_id, movie=movie)

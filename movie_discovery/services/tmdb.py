"""Thin wrapper around the TMDb API for catalog listings and movie details."""

from __future__ import annotations

from typing import Any

import logging

import httpx

from movie_discovery.core.config import Settings, get_settings
from movie_discovery.services.models import MovieDetail, MovieSummary


logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"


class TMDbError(Exception):
    """Base exception for TMDb-related failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TMDbConfigurationError(TMDbError):
    """Raised before any request when the API key is not configured."""


class TMDbTransportError(TMDbError):
    """Raised when the request fails or TMDb answers with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TMDbClient:
    """Simple TMDb HTTP client using API key auth."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.api_key = api_key or settings.tmdb_api_key
        self.base_url = (base_url or settings.tmdb_base_url).rstrip("/")
        self.default_language = settings.tmdb_language
        self.image_base = settings.tmdb_image_base.rstrip("/")
        self.backdrop_base = settings.tmdb_backdrop_base.rstrip("/")
        self.poster_placeholder = settings.poster_placeholder_url
        self.backdrop_placeholder = settings.backdrop_placeholder_url
        self.timeout = settings.tmdb_timeout
        self._transport = transport

    def _request(self, method: str, path: str, *, params: dict[str, Any] | None = None) -> Any:
        if not self.api_key:
            raise TMDbConfigurationError("TMDB_API_KEY is not configured")
        url = f"{self.base_url}{path}"
        query = {"api_key": self.api_key}
        if self.default_language:
            query["language"] = self.default_language
        if params:
            query.update({k: v for k, v in params.items() if v is not None})
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, url, params=query)
        except httpx.RequestError as exc:
            raise TMDbTransportError(str(exc) or exc.__class__.__name__) from exc
        if response.is_error:
            raise TMDbTransportError(
                f"HTTP error! Status: {response.status_code}. "
                f"Message: {_status_message(response)}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise TMDbTransportError(
                "TMDb returned a response that is not valid JSON",
                status_code=response.status_code,
            ) from exc

    def trending(self) -> list[MovieSummary]:
        """Return this week's trending movies."""

        payload = self._request("GET", "/trending/movie/week")
        return self._summaries(payload)

    def search(self, query: str | None = None) -> list[MovieSummary]:
        """Search movies by free text; a blank query returns trending titles."""

        if not query or not query.strip():
            return self.trending()
        payload = self._request("GET", "/search/movie", params={"query": query.strip()})
        return self._summaries(payload)

    def fetch_detail(self, movie_id: int) -> MovieDetail:
        payload = self._request("GET", f"/movie/{movie_id}")
        logger.debug("TMDb details payload: %s", payload)
        try:
            return MovieDetail.from_payload(payload)
        except ValueError as exc:
            raise TMDbTransportError(f"TMDb returned a malformed movie record: {exc}") from exc

    def _summaries(self, payload: Any) -> list[MovieSummary]:
        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            logger.warning("TMDb list payload has no results array")
            return []
        logger.debug("TMDb list payload with %d results", len(results))
        movies = []
        for item in results:
            try:
                movies.append(MovieSummary.from_payload(item))
            except ValueError as exc:
                logger.warning("Skipping malformed TMDb list entry: %s", exc)
        return movies

    def poster_url(self, path: str | None) -> str:
        if not path:
            return self.poster_placeholder
        return f"{self.image_base}/{path.lstrip('/')}"

    def backdrop_url(self, path: str | None) -> str:
        if not path:
            return self.backdrop_placeholder
        return f"{self.backdrop_base}/{path.lstrip('/')}"


def _status_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return UNKNOWN_ERROR
    if isinstance(body, dict) and body.get("status_message"):
        return str(body["status_message"])
    return UNKNOWN_ERROR

"""User favorites backed by the key-value store."""

from __future__ import annotations

import json
import logging

from movie_discovery.db import KeyValueStore, PersistenceError
from movie_discovery.services.models import MovieSummary


logger = logging.getLogger(__name__)


class FavoritesStore:
    """Manages the set of favorited movies.

    Entries are unique by movie id. The full list is written back to the
    key-value store after every mutation. A failed write is logged and the
    in-memory list stays authoritative for the rest of the session.
    """

    def __init__(self, kv_store: KeyValueStore, *, key: str = "favorites") -> None:
        self._kv_store = kv_store
        self.key = key
        self._entries: list[MovieSummary] = self._restore()

    def _restore(self) -> list[MovieSummary]:
        try:
            raw = self._kv_store.get(self.key)
        except PersistenceError as exc:
            logger.warning("Could not read favorites, starting empty: %s", exc)
            return []
        if raw is None:
            logger.info("No stored favorites under '%s', starting empty", self.key)
            return []
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            logger.warning("Stored favorites are not valid JSON, starting empty: %s", exc)
            return []
        if not isinstance(payload, list):
            logger.warning(
                "Stored favorites must be a JSON array, got %s; starting empty",
                type(payload).__name__,
            )
            return []

        entries: list[MovieSummary] = []
        seen: set[int] = set()
        for item in payload:
            try:
                movie = MovieSummary.from_payload(item)
            except ValueError as exc:
                logger.warning("Dropping malformed stored favorite: %s", exc)
                continue
            if movie.id in seen:
                continue
            seen.add(movie.id)
            entries.append(movie)
        logger.info("Restored %d favorites", len(entries))
        return entries

    def is_favorite(self, movie_id: int) -> bool:
        return any(entry.id == movie_id for entry in self._entries)

    def toggle(self, movie: MovieSummary) -> bool:
        """Add ``movie`` if absent, remove it if present.

        Returns:
            True if the movie is a favorite after the call
        """

        if self.is_favorite(movie.id):
            self._entries = [entry for entry in self._entries if entry.id != movie.id]
            added = False
        else:
            self._entries.append(movie.as_summary())
            added = True
        self._persist()
        return added

    def movies(self) -> list[MovieSummary]:
        return list(self._entries)

    def serialize(self) -> str:
        return json.dumps([entry.to_dict() for entry in self._entries], ensure_ascii=False)

    def _persist(self) -> None:
        try:
            self._kv_store.set(self.key, self.serialize())
        except PersistenceError:
            logger.exception("Failed to persist %d favorites", len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

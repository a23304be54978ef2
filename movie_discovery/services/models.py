"""Shared dataclasses for service layer.

TMDb payloads are plain JSON dicts with many optional or loosely typed
fields. Everything the service keeps is converted into these records at the
client boundary so that the rest of the code can rely on explicit shapes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


def parse_date(raw: Any) -> date | None:
    if isinstance(raw, date):
        return raw
    if not raw or not isinstance(raw, str):
        return None
    try:
        return datetime.fromisoformat(raw[:10]).date()
    except ValueError:
        return None


def _optional_str(raw: Any) -> str | None:
    if isinstance(raw, str) and raw.strip():
        return raw
    return None


def _optional_count(raw: Any) -> int | None:
    # bool is an int subclass; JSON true/false is never a count
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    # json.loads turns literals like 1e400 into inf
    if not math.isfinite(raw):
        return None
    if raw < 0:
        return None
    return int(raw)


def _optional_amount(raw: Any) -> int | None:
    # TMDb reports unknown budget/revenue as 0
    value = _optional_count(raw)
    return value or None


def _optional_rating(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if not math.isfinite(raw):
        return None
    if not 0 <= raw <= 10:
        return None
    return float(raw)


def _require_id(payload: dict[str, Any]) -> int:
    raw = payload.get("id")
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"movie payload has no integer id: {raw!r}")
    return raw


def _require_title(payload: dict[str, Any]) -> str:
    title = payload.get("title")
    if not isinstance(title, str):
        raise ValueError(f"movie {payload.get('id')!r} has no title")
    return title


@dataclass(slots=True)
class MovieSummary:
    """A catalog entry as listed by trending/search and stored in favorites."""

    id: int
    title: str
    poster_path: str | None = None
    release_date: date | None = None
    vote_average: float | None = None
    vote_count: int | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> MovieSummary:
        """Build a summary from a TMDb list entry or a persisted favorite.

        Raises ``ValueError`` when the id or title is missing; every other
        field degrades to ``None`` when absent or malformed.
        """

        if not isinstance(payload, dict):
            raise ValueError(f"movie payload must be an object, got {type(payload).__name__}")
        return cls(
            id=_require_id(payload),
            title=_require_title(payload),
            poster_path=_optional_str(payload.get("poster_path")),
            release_date=parse_date(payload.get("release_date")),
            vote_average=_optional_rating(payload.get("vote_average")),
            vote_count=_optional_count(payload.get("vote_count")),
        )

    def as_summary(self) -> MovieSummary:
        return MovieSummary(
            id=self.id,
            title=self.title,
            poster_path=self.poster_path,
            release_date=self.release_date,
            vote_average=self.vote_average,
            vote_count=self.vote_count,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "poster_path": self.poster_path,
            "release_date": self.release_date.isoformat() if self.release_date else None,
            "vote_average": self.vote_average,
            "vote_count": self.vote_count,
        }

    @property
    def release_label(self) -> str:
        if self.release_date is None:
            return "Release Date Unknown"
        return f"Released: {self.release_date.year}"


@dataclass(frozen=True, slots=True)
class Genre:
    id: int
    name: str


@dataclass(slots=True)
class MovieDetail(MovieSummary):
    """Full record for the detail view of a single title."""

    tagline: str | None = None
    overview: str | None = None
    runtime: int | None = None
    genres: list[Genre] = field(default_factory=list)
    budget: int | None = None
    revenue: int | None = None
    backdrop_path: str | None = None
    homepage: str | None = None
    imdb_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> MovieDetail:
        summary = MovieSummary.from_payload(payload)
        return cls(
            id=summary.id,
            title=summary.title,
            poster_path=summary.poster_path,
            release_date=summary.release_date,
            vote_average=summary.vote_average,
            vote_count=summary.vote_count,
            tagline=_optional_str(payload.get("tagline")),
            overview=_optional_str(payload.get("overview")),
            runtime=_optional_count(payload.get("runtime")),
            genres=_parse_genres(payload.get("genres")),
            budget=_optional_amount(payload.get("budget")),
            revenue=_optional_amount(payload.get("revenue")),
            backdrop_path=_optional_str(payload.get("backdrop_path")),
            homepage=_optional_str(payload.get("homepage")),
            imdb_id=_optional_str(payload.get("imdb_id")),
        )


def _parse_genres(raw: Any) -> list[Genre]:
    if not isinstance(raw, list):
        return []
    genres = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        genre_id = item.get("id")
        name = item.get("name")
        if isinstance(genre_id, int) and isinstance(name, str):
            genres.append(Genre(id=genre_id, name=name))
    return genres

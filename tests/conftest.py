import datetime as dt

import pytest
from fastapi.testclient import TestClient

from movie_discovery.core.config import Settings
from movie_discovery.db import PersistenceError
from movie_discovery.main import create_app
from movie_discovery.services.models import Genre, MovieDetail, MovieSummary
from movie_discovery.services.tmdb import TMDbClient, TMDbTransportError


class MemoryKeyValueStore:
    def __init__(self, initial=None):
        self.data = dict(initial or {})
        self.writes = []

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.writes.append((key, value))
        self.data[key] = value


class FailingKeyValueStore(MemoryKeyValueStore):
    def __init__(self, initial=None, *, fail_reads=False):
        super().__init__(initial)
        self.fail_reads = fail_reads

    def get(self, key):
        if self.fail_reads:
            raise PersistenceError("disk unavailable")
        return super().get(key)

    def set(self, key, value):
        raise PersistenceError("disk full")


class FakeTMDbClient(TMDbClient):
    """TMDbClient with canned results instead of HTTP calls."""

    def __init__(self, settings, *, movies=None, details=None, errors=None):
        super().__init__(settings=settings)
        self.movies = list(movies or [])
        self.details = dict(details or {})
        self.errors = dict(errors or {})
        self.search_calls = []
        self.detail_calls = []

    def search(self, query=None):
        self.search_calls.append(query)
        if query in self.errors:
            raise self.errors[query]
        if not query:
            return list(self.movies)
        return [movie for movie in self.movies if query.lower() in movie.title.lower()]

    def fetch_detail(self, movie_id):
        self.detail_calls.append(movie_id)
        if movie_id in self.errors:
            raise self.errors[movie_id]
        if movie_id not in self.details:
            raise TMDbTransportError(
                "HTTP error! Status: 404. Message: The resource you requested could not be found.",
                status_code=404,
            )
        return self.details[movie_id]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(tmdb_api_key="test-key", favorites_key="favorites")


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def dune():
    return MovieSummary(
        id=438631,
        title="Dune",
        poster_path="/d5NXSklXo0qyIYkgV94XAgMIckC.jpg",
        release_date=dt.date(2021, 9, 15),
        vote_average=7.8,
        vote_count=11000,
    )


@pytest.fixture
def arrival():
    return MovieSummary(id=329865, title="Arrival", release_date=dt.date(2016, 11, 10))


@pytest.fixture
def dune_detail(dune):
    return MovieDetail(
        id=dune.id,
        title=dune.title,
        poster_path=dune.poster_path,
        release_date=dune.release_date,
        vote_average=dune.vote_average,
        vote_count=dune.vote_count,
        tagline="Beyond fear, destiny awaits.",
        overview="Paul Atreides travels to Arrakis.",
        runtime=155,
        genres=[Genre(id=878, name="Science Fiction"), Genre(id=12, name="Adventure")],
        budget=165000000,
        revenue=402027830,
        backdrop_path="/jYEW5xZkZk2WTrdbMGAPFuBqbDc.jpg",
        homepage="https://www.dunemovie.com",
        imdb_id="tt1160419",
    )


@pytest.fixture
def tmdb(settings, dune, arrival, dune_detail):
    return FakeTMDbClient(settings, movies=[dune, arrival], details={dune.id: dune_detail})


@pytest.fixture
def client(settings, kv_store, tmdb):
    app = create_app(settings=settings, kv_store=kv_store, client=tmdb)
    with TestClient(app) as test_client:
        yield test_client

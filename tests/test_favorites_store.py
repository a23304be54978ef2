import json
import logging

import pytest

from movie_discovery.services.favorites import FavoritesStore
from movie_discovery.services.models import MovieSummary

from conftest import FailingKeyValueStore, MemoryKeyValueStore


def test_toggle_adds_then_persists_full_list(kv_store):
    store = FavoritesStore(kv_store)

    assert store.toggle(MovieSummary(id=42, title="X")) is True

    assert store.is_favorite(42)
    stored = json.loads(kv_store.data["favorites"])
    assert stored == [
        {
            "id": 42,
            "title": "X",
            "poster_path": None,
            "release_date": None,
            "vote_average": None,
            "vote_count": None,
        }
    ]


def test_toggle_removes_existing_entry():
    kv = MemoryKeyValueStore({"favorites": json.dumps([{"id": 42, "title": "X"}])})
    store = FavoritesStore(kv)
    assert store.is_favorite(42)

    assert store.toggle(MovieSummary(id=42, title="X")) is False

    assert not store.is_favorite(42)
    assert kv.data["favorites"] == "[]"


@pytest.mark.parametrize("initially_favorite", [True, False])
def test_double_toggle_restores_membership(kv_store, dune, initially_favorite):
    store = FavoritesStore(kv_store)
    if initially_favorite:
        store.toggle(dune)

    store.toggle(dune)
    store.toggle(dune)

    assert store.is_favorite(dune.id) is initially_favorite


def test_entries_stay_unique_by_id_and_later_payload_wins(kv_store):
    store = FavoritesStore(kv_store)
    store.toggle(MovieSummary(id=7, title="Old title"))
    store.toggle(MovieSummary(id=7, title="Ignored, removes by id"))
    store.toggle(MovieSummary(id=7, title="New title"))

    movies = store.movies()
    assert [movie.id for movie in movies] == [7]
    assert movies[0].title == "New title"


def test_every_mutation_overwrites_stored_value(kv_store, dune, arrival):
    store = FavoritesStore(kv_store)
    store.toggle(dune)
    store.toggle(arrival)
    store.toggle(dune)

    assert len(kv_store.writes) == 3
    assert [item["id"] for item in json.loads(kv_store.writes[-1][1])] == [arrival.id]


def test_detail_records_are_stored_as_summaries(kv_store, dune_detail):
    store = FavoritesStore(kv_store)
    store.toggle(dune_detail)

    stored = json.loads(kv_store.data["favorites"])[0]
    assert set(stored) == {"id", "title", "poster_path", "release_date", "vote_average", "vote_count"}
    assert stored["release_date"] == "2021-09-15"
    assert type(store.movies()[0]) is MovieSummary


def test_restores_previous_session(kv_store, dune, arrival):
    first = FavoritesStore(kv_store)
    first.toggle(dune)
    first.toggle(arrival)

    second = FavoritesStore(kv_store)

    assert second.movies() == [dune, arrival]


def test_invalid_json_yields_empty_set(caplog):
    kv = MemoryKeyValueStore({"favorites": "not valid json"})
    with caplog.at_level(logging.WARNING):
        store = FavoritesStore(kv)
    assert len(store) == 0
    assert "not valid JSON" in caplog.text


def test_missing_key_yields_empty_set(kv_store):
    store = FavoritesStore(kv_store)
    assert store.movies() == []
    assert kv_store.writes == []


def test_non_array_json_yields_empty_set():
    store = FavoritesStore(MemoryKeyValueStore({"favorites": json.dumps({"id": 1})}))
    assert len(store) == 0


def test_malformed_and_duplicate_entries_are_dropped():
    raw = json.dumps(
        [
            {"id": 1, "title": "Kept"},
            {"title": "No id"},
            "garbage",
            {"id": 1, "title": "Duplicate"},
            {"id": 2, "title": "Also kept", "vote_average": 42},
        ]
    )
    store = FavoritesStore(MemoryKeyValueStore({"favorites": raw}))

    movies = store.movies()
    assert [(movie.id, movie.title) for movie in movies] == [(1, "Kept"), (2, "Also kept")]
    assert movies[1].vote_average is None


def test_read_failure_does_not_break_construction():
    store = FavoritesStore(FailingKeyValueStore(fail_reads=True))
    assert len(store) == 0


def test_write_failure_keeps_in_memory_state(dune, caplog):
    store = FavoritesStore(FailingKeyValueStore())

    with caplog.at_level(logging.ERROR):
        assert store.toggle(dune) is True

    assert store.is_favorite(dune.id)
    assert "Failed to persist" in caplog.text


def test_custom_key(dune):
    kv = MemoryKeyValueStore()
    store = FavoritesStore(kv, key="movie-favorites")
    store.toggle(dune)
    assert "movie-favorites" in kv.data


def test_out_of_range_numbers_in_stored_entries_degrade_to_none():
    raw = '[{"id": 1, "title": "X", "vote_count": 1e400, "vote_average": -1e400}]'

    store = FavoritesStore(MemoryKeyValueStore({"favorites": raw}))

    movie = store.movies()[0]
    assert movie.id == 1
    assert movie.vote_count is None
    assert movie.vote_average is None

import json
import os
from datetime import timedelta

import pytest

from tmdb_movies import metrics
from tmdb_movies.errors import CorruptCacheError, InvalidArgumentError
from tmdb_movies.movie_cache import MovieCacheStore


def test_data_file_path_layout(tmp_path):
    store = MovieCacheStore(tmp_path)

    assert store.data_file_path("603", "de") == tmp_path / "tmdb-movies2" / "603" / "all-de.json"
    assert store.data_file_path("603", None) == tmp_path / "tmdb-movies2" / "603" / "all-alllang.json"
    assert store.data_file_path("603", "  ") == tmp_path / "tmdb-movies2" / "603" / "all-alllang.json"


def test_data_file_path_requires_id(tmp_path):
    store = MovieCacheStore(tmp_path)
    with pytest.raises(InvalidArgumentError):
        store.data_file_path("", "en")


def test_missing_entry_is_not_fresh(tmp_path):
    store = MovieCacheStore(tmp_path)
    assert store.is_fresh(store.data_file_path("1", "en")) is False


def test_freshness_window_is_two_days(tmp_path):
    store = MovieCacheStore(tmp_path)
    path = store.data_file_path("603", "en")
    store.write(path, {"id": 603})

    written_at = path.stat().st_mtime
    assert store.is_fresh(path, now=written_at + 47 * 3600) is True
    assert store.is_fresh(path, now=written_at + 49 * 3600) is False


def test_freshness_uses_file_mtime(tmp_path):
    store = MovieCacheStore(tmp_path, max_age=timedelta(hours=1))
    path = store.data_file_path("603", "en")
    store.write(path, {"id": 603})
    assert store.is_fresh(path) is True

    old = path.stat().st_mtime - 2 * 3600
    os.utime(path, (old, old))
    assert store.is_fresh(path) is False


def test_write_read_preserves_fields(tmp_path, movie_record):
    store = MovieCacheStore(tmp_path)
    path = store.data_file_path("603", "en-US")
    store.write(path, movie_record)

    loaded = store.read(path)
    for key in ("id", "imdb_id", "title", "overview", "release_date", "poster_path"):
        assert loaded[key] == movie_record[key]
    assert metrics.snapshot()["cache_writes"] == 1


def test_write_is_utf8_and_leaves_no_temp_files(tmp_path):
    store = MovieCacheStore(tmp_path)
    path = store.data_file_path("1", "es-ES")
    store.write(path, {"id": 1, "title": "El laberinto del fauno"})
    store.write(path, {"id": 1, "title": "Amélie"})

    assert "Amélie" in path.read_text(encoding="utf-8")
    assert [p.name for p in path.parent.iterdir()] == [path.name]


def test_read_missing_raises_file_not_found(tmp_path):
    store = MovieCacheStore(tmp_path)
    with pytest.raises(FileNotFoundError):
        store.read(store.data_file_path("1", "en"))


def test_read_corrupt_entry(tmp_path):
    store = MovieCacheStore(tmp_path)
    path = store.data_file_path("1", "en")
    path.parent.mkdir(parents=True)
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(CorruptCacheError) as exc_info:
        store.read(path)
    assert exc_info.value.path == path
    assert metrics.snapshot()["cache_corrupt"] == 1


def test_read_non_object_is_corrupt(tmp_path):
    store = MovieCacheStore(tmp_path)
    path = store.data_file_path("1", "en")
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

    with pytest.raises(CorruptCacheError):
        store.read(path)

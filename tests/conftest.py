from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from tmdb_movies import metrics
from tmdb_movies.errors import NOT_FOUND, NotFound
from tmdb_movies.models import SettingsSnapshot
from tmdb_movies.movie_cache import MovieCacheStore
from tmdb_movies.movie_provider import TmdbMovieProvider
from tmdb_movies.tmdb_search import TmdbSearch
from tmdb_movies.tmdb_settings import TmdbSettingsResolver


@dataclass(slots=True)
class MovieCall:
    tmdb_id: str
    language: str | None
    image_languages: str | None


class FakeMovieSource:
    """
    Cliente TMDb en memoria.

    `responses` se indexa por idioma pedido (None = sin idioma). Un valor que
    sea excepción se lanza; NOT_FOUND se devuelve tal cual.
    """

    def __init__(self, responses: dict[str | None, object]) -> None:
        self.responses = responses
        self.calls: list[MovieCall] = []
        self.search_calls: list[tuple[str, int | None, str | None]] = []
        self.search_results: list[dict[str, object]] = []
        self.closed = False

    async def fetch_movie(self, tmdb_id: str, language: str | None, image_languages: str | None):
        self.calls.append(MovieCall(tmdb_id, language, image_languages))
        await asyncio.sleep(0)
        value = self.responses.get(language, NOT_FOUND)
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, NotFound):
            return value
        return dict(value)  # type: ignore[call-overload]

    async def search_movies(self, query: str, *, year: int | None = None, language: str | None = None):
        self.search_calls.append((query, year, language))
        return list(self.search_results)

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeConfigSource:
    snapshot: SettingsSnapshot
    delay: float = 0.0
    calls: int = 0
    failures: list[BaseException] = field(default_factory=list)

    async def fetch_configuration(self) -> SettingsSnapshot:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            raise self.failures.pop(0)
        return self.snapshot


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture()
def settings_snapshot() -> SettingsSnapshot:
    return SettingsSnapshot(
        base_url="http://image.tmdb.org/t/p/",
        secure_base_url="https://image.tmdb.org/t/p/",
        poster_sizes=("w92", "w500", "original"),
    )


@pytest.fixture()
def movie_record() -> dict[str, object]:
    return {
        "id": 603,
        "imdb_id": "tt0133093",
        "title": "The Matrix",
        "original_title": "The Matrix",
        "overview": "A hacker learns the truth about reality.",
        "tagline": "Welcome to the Real World.",
        "release_date": "1999-03-30",
        "poster_path": "/matrix.jpg",
        "vote_average": 8.2,
        "runtime": 136,
        "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
        "production_companies": [{"id": 79, "name": "Village Roadshow Pictures"}],
        "production_countries": [{"iso_3166_1": "US", "name": "United States of America"}],
        "belongs_to_collection": {"id": 2344, "name": "The Matrix Collection"},
        "casts": {
            "cast": [
                {"id": 2975, "name": "Laurence Fishburne", "character": "Morpheus", "order": 1},
                {"id": 6384, "name": "Keanu Reeves", "character": "Neo", "order": 0},
            ],
            "crew": [
                {"id": 9339, "name": "Lana Wachowski", "job": "Director"},
                {"id": 9340, "name": "Lilly Wachowski", "job": "Screenplay"},
                {"id": 1, "name": "Someone", "job": "Gaffer"},
            ],
        },
        "releases": {
            "countries": [
                {"iso_3166_1": "US", "certification": "R"},
                {"iso_3166_1": "DE", "certification": "16"},
            ]
        },
        "images": {
            "posters": [
                {"file_path": "/en.jpg", "iso_639_1": "en", "vote_average": 5.0},
                {"file_path": "/de.jpg", "iso_639_1": "de", "vote_average": 1.0},
                {"file_path": "/plain.jpg", "iso_639_1": None, "vote_average": 9.0},
            ]
        },
        "keywords": {"keywords": [{"id": 1, "name": "simulation"}, {"id": 2, "name": "hacker"}]},
        "trailers": {"youtube": [{"source": "vKQi3bBA1y8", "name": "Trailer"}]},
    }


@pytest.fixture()
def cache_store(tmp_path: Path) -> MovieCacheStore:
    return MovieCacheStore(tmp_path)


def build_provider(
    source: FakeMovieSource,
    cache: MovieCacheStore,
    snapshot: SettingsSnapshot,
    *,
    with_search: bool = True,
) -> tuple[TmdbMovieProvider, FakeConfigSource]:
    config = FakeConfigSource(snapshot)
    resolver = TmdbSettingsResolver(config)
    searcher = TmdbSearch(source, resolver) if with_search else None
    return TmdbMovieProvider(source, cache, resolver, searcher=searcher), config

import asyncio

from conftest import FakeConfigSource, FakeMovieSource

from tmdb_movies import metrics
from tmdb_movies.models import MovieLookupInfo
from tmdb_movies.tmdb_search import TmdbSearch, split_name_and_year
from tmdb_movies.tmdb_settings import TmdbSettingsResolver


def test_split_name_and_year():
    assert split_name_and_year("Alien (1979)", None) == ("Alien", 1979)
    assert split_name_and_year("Alien (1979)", 1986) == ("Alien", 1986)
    assert split_name_and_year("  Alien  ", None) == ("Alien", None)
    assert split_name_and_year("(1979)", None) == ("(1979)", None)
    assert split_name_and_year("Blade Runner 2049", None) == ("Blade Runner 2049", None)


def test_search_strips_year_and_normalizes_language(settings_snapshot):
    source = FakeMovieSource({})
    source.search_results = [{"id": 348, "title": "Alien", "release_date": "1979-05-25"}]
    config = FakeConfigSource(settings_snapshot)
    search = TmdbSearch(source, TmdbSettingsResolver(config))

    info = MovieLookupInfo(name="Alien (1979)", metadata_language="es-es")
    results = asyncio.run(search.get_movie_search_results(info))

    assert source.search_calls == [("Alien", 1979, "es-ES")]
    assert [r.production_year for r in results] == [1979]
    assert metrics.snapshot()["text_searches"] == 1


def test_empty_results_skip_settings(settings_snapshot):
    config = FakeConfigSource(settings_snapshot)
    search = TmdbSearch(FakeMovieSource({}), TmdbSettingsResolver(config))

    assert asyncio.run(search.get_movie_search_results(MovieLookupInfo(name="Nothing"))) == []
    assert config.calls == 0


def test_blank_name_does_not_query(settings_snapshot):
    source = FakeMovieSource({})
    search = TmdbSearch(source, TmdbSettingsResolver(FakeConfigSource(settings_snapshot)))

    assert asyncio.run(search.get_movie_search_results(MovieLookupInfo(name="  "))) == []
    assert source.search_calls == []

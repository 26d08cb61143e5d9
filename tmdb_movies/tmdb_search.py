from __future__ import annotations

import re
from typing import Final, Protocol

from tmdb_movies import logger
from tmdb_movies import metrics
from tmdb_movies.language import normalize_language
from tmdb_movies.mapping import to_search_candidate
from tmdb_movies.models import MovieLookupInfo, SearchCandidate
from tmdb_movies.tmdb_settings import TmdbSettingsResolver

# "Alien (1979)" -> ("Alien", 1979)
_TRAILING_YEAR_RE: Final[re.Pattern[str]] = re.compile(r"^(?P<name>.*?)\s*\((?P<year>(?:19|20)\d{2})\)\s*$")


class MovieSearchSource(Protocol):
    async def search_movies(
        self,
        query: str,
        *,
        year: int | None = None,
        language: str | None = None,
    ) -> list[dict[str, object]]: ...


def split_name_and_year(name: str, year: int | None) -> tuple[str, int | None]:
    """Separa un año final entre paréntesis si el caller no dio año."""
    cleaned = name.strip()
    m = _TRAILING_YEAR_RE.match(cleaned)
    if m is None or not m.group("name").strip():
        return cleaned, year
    return m.group("name").strip(), year if year is not None else int(m.group("year"))


class TmdbSearch:
    """
    Búsqueda por texto libre contra /3/search/movie.

    Sin caché: cada llamada va a red y los candidatos se devuelven tal cual
    vienen (orden de relevancia de TMDb).
    """

    def __init__(self, source: MovieSearchSource, settings_resolver: TmdbSettingsResolver) -> None:
        self._source = source
        self._settings = settings_resolver

    async def get_movie_search_results(self, search_info: MovieLookupInfo) -> list[SearchCandidate]:
        name = (search_info.name or "").strip()
        if not name:
            return []

        query, year = split_name_and_year(name, search_info.year)
        language = normalize_language(search_info.metadata_language)

        metrics.inc("text_searches", 1)
        results = await self._source.search_movies(query, year=year, language=language)
        logger.debug_ctx("TMDB", f"search {query!r} year={year} -> {len(results)} results")
        if not results:
            return []

        image_base = (await self._settings.get()).image_url("original")
        return [to_search_candidate(r, image_base) for r in results]

from __future__ import annotations

"""
tmdb_movies/movie_provider.py

Orquestador cache-first de fichas TMDb.

Flujo de ensure_movie_info(tmdb_id, idioma)
-------------------------------------------
1) Entrada fresca en disco => se devuelve sin red.
2) GET /3/movie/{id} con idioma normalizado + cadena de idiomas de imagen.
   404 => NOT_FOUND, no se escribe nada.
3) Si el overview viene vacío y el idioma no es inglés, segunda petición con
   language=en. Solo se copia `overview` de esa respuesta; si falla, se
   registra y se sigue con el registro principal.
4) Escritura atómica del registro.

Concurrencia
------------
- Cada clave (id, idioma) tiene su asyncio.Lock: dos lookups simultáneas de la
  misma ficha hacen una sola petición; la segunda re-chequea frescura dentro
  del lock y reutiliza lo escrito.
- Los locks son por event loop y se liberan al quedar sin usuarios: un host
  síncrono puede llamar a asyncio.run() varias veces con el mismo provider.
- CancelledError nunca se captura: una task cancelada no escribe caché.
"""

import asyncio
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Protocol

from tmdb_movies import logger
from tmdb_movies import metrics
from tmdb_movies.config_tmdb import TmdbClientSettings
from tmdb_movies.errors import NOT_FOUND, CorruptCacheError, InvalidArgumentError, NotFound, TmdbError
from tmdb_movies.language import ENGLISH, image_languages_param, is_english, normalize_language
from tmdb_movies.mapping import to_movie_metadata, to_search_candidate
from tmdb_movies.models import MovieLookupInfo, MovieMetadata, MovieRecord, SearchCandidate
from tmdb_movies.movie_cache import MovieCacheStore
from tmdb_movies.tmdb_client import TmdbClient
from tmdb_movies.tmdb_search import TmdbSearch
from tmdb_movies.tmdb_settings import TmdbSettingsResolver


class MovieSource(Protocol):
    async def fetch_movie(
        self,
        tmdb_id: str,
        language: str | None,
        image_languages: str | None,
    ) -> MovieRecord | NotFound: ...


def _dbg(msg: object) -> None:
    logger.debug_ctx("TMDB", msg)


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class TmdbMovieProvider:
    def __init__(
        self,
        client: MovieSource,
        cache: MovieCacheStore,
        settings_resolver: TmdbSettingsResolver,
        *,
        searcher: TmdbSearch | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._settings = settings_resolver
        self._searcher = searcher

        self._key_locks: dict[tuple[asyncio.AbstractEventLoop, str], _KeyLock] = {}
        self._key_locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: TmdbClientSettings | None = None) -> "TmdbMovieProvider":
        """Cablea cliente HTTP, caché en disco, resolver de settings y búsqueda."""
        s = settings or TmdbClientSettings.from_env()
        client = TmdbClient(s)
        resolver = TmdbSettingsResolver(client)
        return cls(
            client,
            MovieCacheStore(s.cache_root, max_age=s.cache_max_age),
            resolver,
            searcher=TmdbSearch(client, resolver),
        )

    @property
    def cache(self) -> MovieCacheStore:
        return self._cache

    @property
    def settings_resolver(self) -> TmdbSettingsResolver:
        return self._settings

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    @asynccontextmanager
    async def _key_lock(self, key: str) -> AsyncIterator[None]:
        """
        Lock por clave y por event loop. La entrada se borra al soltarla si no
        queda nadie esperando.
        """
        slot = (asyncio.get_running_loop(), key)
        with self._key_locks_guard:
            entry = self._key_locks.get(slot)
            if entry is None:
                entry = _KeyLock()
                self._key_locks[slot] = entry
            entry.users += 1

        try:
            async with entry.lock:
                yield
        finally:
            with self._key_locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    self._key_locks.pop(slot, None)

    # ------------------------------------------------------------------
    # Fetch + fallback
    # ------------------------------------------------------------------

    async def fetch_main_result(self, tmdb_id: str, language: str | None) -> MovieRecord | NotFound:
        """Petición principal; idioma e idiomas de imagen solo si hay idioma."""
        if language:
            return await self._client.fetch_movie(
                tmdb_id,
                normalize_language(language),
                image_languages_param(language),
            )
        return await self._client.fetch_movie(tmdb_id, None, None)

    async def _fill_overview_from_english(self, tmdb_id: str, language: str, record: MovieRecord) -> None:
        logger.info(f"[TMDB] Overview vacío para {tmdb_id} ({language}); se pide en inglés.")
        metrics.inc("fallback_fetches", 1)

        try:
            fallback = await self._client.fetch_movie(tmdb_id, ENGLISH, image_languages_param(language))
        except TmdbError as exc:
            metrics.inc("fallback_failures", 1)
            logger.warning(f"[TMDB] Fallback en inglés falló para {tmdb_id}: {exc!r}")
            return

        if isinstance(fallback, NotFound):
            metrics.inc("fallback_failures", 1)
            logger.warning(f"[TMDB] Fallback en inglés sin resultado (404) para {tmdb_id}")
            return

        record["overview"] = fallback.get("overview")

    async def download_movie_info(self, tmdb_id: str, language: str | None, path: Path) -> bool:
        record = await self.fetch_main_result(tmdb_id, language)
        if isinstance(record, NotFound):
            _dbg(f"{tmdb_id} not found; nothing cached")
            return False

        if _is_blank(record.get("overview")) and language and not is_english(language):
            await self._fill_overview_from_english(tmdb_id, language, record)

        await self._cache.awrite(path, record)
        return True

    async def ensure_movie_info(self, tmdb_id: str, language: str | None, *, force: bool = False) -> bool:
        """
        Garantiza una entrada fresca para (tmdb_id, language).

        True si la entrada existe tras la llamada; False si TMDb no conoce el id.
        """
        if not tmdb_id:
            raise InvalidArgumentError("tmdb_id is required")

        path = self._cache.data_file_path(tmdb_id, language)
        if not force and await self._cache.ais_fresh(path):
            metrics.inc("cache_hits", 1)
            return True

        async with self._key_lock(str(path)):
            if not force and await self._cache.ais_fresh(path):
                metrics.inc("cache_hits", 1)
                return True

            metrics.inc("cache_misses", 1)
            _dbg(f"miss {tmdb_id} lang={language or '-'} -> fetch")
            return await self.download_movie_info(tmdb_id, language, path)

    async def ensure_cached(self, tmdb_id: str, language: str | None) -> None:
        await self.ensure_movie_info(tmdb_id, language)

    async def fetch_full_metadata(self, tmdb_id: str, language: str | None) -> MovieRecord | NotFound:
        if not await self.ensure_movie_info(tmdb_id, language):
            return NOT_FOUND

        path = self._cache.data_file_path(tmdb_id, language)
        try:
            return await self._cache.aread(path)
        except CorruptCacheError as exc:
            logger.warning(f"[TMDB] Entrada de caché corrupta ({exc.path}); se descarga de nuevo.")

        if not await self.ensure_movie_info(tmdb_id, language, force=True):
            return NOT_FOUND
        return await self._cache.aread(path)

    async def fetch_metadata(self, tmdb_id: str, language: str | None) -> MovieMetadata | None:
        record = await self.fetch_full_metadata(tmdb_id, language)
        if isinstance(record, NotFound):
            return None
        return to_movie_metadata(record, language)

    # ------------------------------------------------------------------
    # Búsqueda
    # ------------------------------------------------------------------

    async def lookup(self, tmdb_id: str, language: str | None) -> SearchCandidate | None:
        record = await self.fetch_full_metadata(tmdb_id, language)
        if isinstance(record, NotFound):
            return None

        settings = await self._settings.get()
        return to_search_candidate(record, settings.image_url("original"))

    async def get_search_results(self, search_info: MovieLookupInfo) -> list[SearchCandidate]:
        """
        Con id de TMDb: ficha cacheada (0 ó 1 candidato), nunca búsqueda por
        texto. Sin id: se delega en TmdbSearch y se devuelve tal cual.
        """
        tmdb_id = search_info.tmdb_id
        if tmdb_id:
            candidate = await self.lookup(tmdb_id, search_info.metadata_language)
            return [candidate] if candidate is not None else []

        if self._searcher is None:
            return []
        return await self._searcher.get_movie_search_results(search_info)

    async def lookup_candidates(self, search_info: MovieLookupInfo) -> list[SearchCandidate]:
        return await self.get_search_results(search_info)

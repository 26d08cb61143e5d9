from __future__ import annotations

"""
tmdb_movies/movie_cache.py

Cache en disco de fichas TMDb: un JSON por (tmdb_id, idioma).

Layout
------
    <cache_root>/tmdb-movies2/<tmdb_id>/all-<idioma|alllang>.json

Política
--------
- Frescura SOLO por mtime del fichero (<= max_age, 2 días por defecto).
  No se valida el contenido.
- Escritura atómica (temp en el mismo directorio + fsync + replace): un lector
  concurrente ve la versión anterior o la nueva, nunca un fichero a medias.
- Este módulo nunca borra entradas.
"""

import asyncio
import json
import os
import tempfile
import time
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Final, cast

from tmdb_movies import logger
from tmdb_movies import metrics
from tmdb_movies.errors import CorruptCacheError, InvalidArgumentError
from tmdb_movies.models import MovieRecord

MOVIES_DIR_NAME: Final[str] = "tmdb-movies2"
ALL_LANGUAGES: Final[str] = "alllang"
DEFAULT_MAX_AGE: Final[timedelta] = timedelta(days=2)


def _dbg(msg: object) -> None:
    logger.debug_ctx("TMDB_CACHE", msg)


class MovieCacheStore:
    def __init__(self, cache_root: Path | str, *, max_age: timedelta = DEFAULT_MAX_AGE) -> None:
        self._cache_root = Path(cache_root)
        self._max_age_s = max(0.0, max_age.total_seconds())

    @property
    def cache_root(self) -> Path:
        return self._cache_root

    def movies_data_path(self) -> Path:
        return self._cache_root / MOVIES_DIR_NAME

    def movie_data_path(self, tmdb_id: str) -> Path:
        return self.movies_data_path() / tmdb_id

    def data_file_path(self, tmdb_id: str, preferred_language: str | None) -> Path:
        """
        Path determinista de la entrada. Idioma vacío => bucket "alllang".
        """
        if not tmdb_id:
            raise InvalidArgumentError("tmdb_id is required")

        language = preferred_language if preferred_language and preferred_language.strip() else ALL_LANGUAGES
        return self.movie_data_path(tmdb_id) / f"all-{language}.json"

    # ------------------------------------------------------------------
    # Frescura
    # ------------------------------------------------------------------

    def is_fresh(self, path: Path, *, now: float | None = None) -> bool:
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return False

        now_s = time.time() if now is None else now
        return (now_s - mtime) <= self._max_age_s

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    def read(self, path: Path) -> MovieRecord:
        """
        Lee el snapshot. FileNotFoundError si no existe; CorruptCacheError si
        existe pero no es un objeto JSON (el caller decide si refetch).
        """
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            metrics.inc("cache_corrupt", 1)
            raise CorruptCacheError(f"Unreadable cache entry {path}: {exc!r}", path=path) from exc

        if not isinstance(raw, dict):
            metrics.inc("cache_corrupt", 1)
            raise CorruptCacheError(
                f"Cache entry {path} is not a JSON object ({type(raw).__name__})",
                path=path,
            )

        return cast(MovieRecord, raw)

    def write(self, path: Path, record: Mapping[str, object]) -> None:
        dirpath = path.parent
        dirpath.mkdir(parents=True, exist_ok=True)

        temp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                delete=False,
                dir=str(dirpath),
                prefix=f".{path.name}.",
                suffix=".tmp",
            ) as tf:
                temp_name = tf.name
                json.dump(dict(record), tf, ensure_ascii=False)
                tf.flush()
                try:
                    os.fsync(tf.fileno())
                except OSError:
                    pass

            os.replace(temp_name, str(path))
        finally:
            if temp_name and os.path.exists(temp_name):
                try:
                    os.remove(temp_name)
                except OSError:
                    pass

        metrics.inc("cache_writes", 1)
        _dbg(f"wrote {path}")

    # ------------------------------------------------------------------
    # Variantes async (I/O en worker thread)
    # ------------------------------------------------------------------

    async def ais_fresh(self, path: Path) -> bool:
        return await asyncio.to_thread(self.is_fresh, path)

    async def aread(self, path: Path) -> MovieRecord:
        return await asyncio.to_thread(self.read, path)

    async def awrite(self, path: Path, record: Mapping[str, object]) -> None:
        await asyncio.to_thread(self.write, path, record)

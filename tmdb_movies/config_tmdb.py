from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Final

from tmdb_movies.config_base import (
    CACHE_DIR,
    _cap_float_min,
    _cap_int,
    _get_env_bool,
    _get_env_float,
    _get_env_int,
    _get_env_str,
)

# ============================================================
# TMDb (API + HTTP tuning)
# ============================================================

TMDB_API_KEY: str | None = _get_env_str("TMDB_API_KEY", None)

TMDB_BASE_URL: str = _get_env_str("TMDB_BASE_URL", "https://api.themoviedb.org/") or "https://api.themoviedb.org/"

TMDB_HTTP_TIMEOUT_SECONDS: float = _cap_float_min(
    "TMDB_HTTP_TIMEOUT_SECONDS",
    _get_env_float("TMDB_HTTP_TIMEOUT_SECONDS", 10.0),
    min_v=0.5,
)

TMDB_HTTP_RETRY_TOTAL: int = _cap_int(
    "TMDB_HTTP_RETRY_TOTAL",
    _get_env_int("TMDB_HTTP_RETRY_TOTAL", 3),
    min_v=0,
    max_v=10,
)
TMDB_HTTP_RETRY_BACKOFF_FACTOR: float = _cap_float_min(
    "TMDB_HTTP_RETRY_BACKOFF_FACTOR",
    _get_env_float("TMDB_HTTP_RETRY_BACKOFF_FACTOR", 0.5),
    min_v=0.0,
)

# Pool de conexiones: alineado con cuántas lookups concurrentes esperamos.
TMDB_HTTP_POOL_SIZE: int = _cap_int(
    "TMDB_HTTP_POOL_SIZE",
    _get_env_int("TMDB_HTTP_POOL_SIZE", 8),
    min_v=1,
    max_v=64,
)

TMDB_HTTP_USER_AGENT: str = _get_env_str("TMDB_HTTP_USER_AGENT", "tmdb-movies/0.1.0") or "tmdb-movies/0.1.0"

# ============================================================
# TMDb (cache en disco)
# ============================================================

TMDB_CACHE_MAX_AGE_DAYS: float = _cap_float_min(
    "TMDB_CACHE_MAX_AGE_DAYS",
    _get_env_float("TMDB_CACHE_MAX_AGE_DAYS", 2.0),
    min_v=0.0,
)

TMDB_CACHE_ROOT: Final[Path] = CACHE_DIR

TMDB_METRICS_ENABLED: bool = _get_env_bool("TMDB_METRICS_ENABLED", True)


@dataclass(frozen=True)
class TmdbClientSettings:
    """
    Settings del cliente TMDb agrupados en un objeto inyectable.

    Los módulos globales de arriba son el default; tests y hosts pueden
    construir uno propio sin tocar el entorno.
    """

    api_key: str | None
    base_url: str = "https://api.themoviedb.org/"
    timeout_seconds: float = 10.0
    retry_total: int = 3
    retry_backoff_factor: float = 0.5
    pool_size: int = 8
    user_agent: str = "tmdb-movies/0.1.0"
    cache_root: Path = CACHE_DIR
    cache_max_age: timedelta = timedelta(days=2)

    @staticmethod
    def from_env() -> "TmdbClientSettings":
        return TmdbClientSettings(
            api_key=TMDB_API_KEY,
            base_url=TMDB_BASE_URL,
            timeout_seconds=TMDB_HTTP_TIMEOUT_SECONDS,
            retry_total=TMDB_HTTP_RETRY_TOTAL,
            retry_backoff_factor=TMDB_HTTP_RETRY_BACKOFF_FACTOR,
            pool_size=TMDB_HTTP_POOL_SIZE,
            user_agent=TMDB_HTTP_USER_AGENT,
            cache_root=TMDB_CACHE_ROOT,
            cache_max_age=timedelta(days=TMDB_CACHE_MAX_AGE_DAYS),
        )

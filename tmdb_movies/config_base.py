"""
tmdb_movies/config_base.py

Configuración base del paquete: .env, modo de ejecución, raíz de caché y
salida del logger. Los valores inválidos se avisan (always=True) y caen al
default; nunca abortan el import.

No importa otros config_*.py (config_tmdb depende de este, no al revés).
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Final, TypeVar

from dotenv import load_dotenv

# Las variables ya exportadas en el entorno ganan al .env.
load_dotenv(override=False)

from tmdb_movies import logger as _logger  # noqa: E402

T = TypeVar("T")

PROJECT_DIR: Final[Path] = Path(__file__).resolve().parent.parent

_BOOL_WORDS: Final[dict[str, bool]] = {
    **dict.fromkeys(("1", "true", "t", "yes", "y", "on"), True),
    **dict.fromkeys(("0", "false", "f", "no", "n", "off"), False),
}


def _clean_env_raw(v: object | None) -> str | None:
    """Quita espacios y comillas envolventes; vacío => None."""
    if v is None:
        return None
    s = str(v).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in "'\"":
        s = s[1:-1].strip()
    return s or None


def _parse_env(name: str, default: T, convert: Callable[[str], T], kind: str) -> T:
    raw = _clean_env_raw(os.getenv(name))
    if raw is None:
        return default
    try:
        return convert(raw)
    except (KeyError, ValueError):
        _logger.warning(f"{name}={raw!r} is not a valid {kind}; using {default!r}", always=True)
        return default


def _get_env_str(name: str, default: str | None = None) -> str | None:
    return _clean_env_raw(os.getenv(name)) or default


def _get_env_int(name: str, default: int) -> int:
    return _parse_env(name, default, int, "int")


def _get_env_float(name: str, default: float) -> float:
    return _parse_env(name, default, float, "float")


def _get_env_bool(name: str, default: bool) -> bool:
    return _parse_env(name, default, lambda s: _BOOL_WORDS[s.lower()], "bool")


def _cap_int(name: str, value: int, *, min_v: int, max_v: int) -> int:
    capped = min(max(value, min_v), max_v)
    if capped != value:
        _logger.warning(f"{name}={value} out of [{min_v}, {max_v}]; using {capped}", always=True)
    return capped


def _cap_float_min(name: str, value: float, *, min_v: float) -> float:
    if value < min_v:
        _logger.warning(f"{name}={value} below {min_v}; using {min_v}", always=True)
        return min_v
    return value


def _resolve_dir(raw: str, *, relative_to: Path) -> Path:
    p = Path(raw).expanduser()
    return p if p.is_absolute() else relative_to / p


# ============================================================
# Modo de ejecución
# ============================================================

DEBUG_MODE: bool = _get_env_bool("DEBUG_MODE", False)
SILENT_MODE: bool = _get_env_bool("SILENT_MODE", False)
HTTP_DEBUG: bool = _get_env_bool("HTTP_DEBUG", False)
LOG_LEVEL: str | None = _get_env_str("LOG_LEVEL")

# ============================================================
# Raíz de caché (las fichas cuelgan de CACHE_DIR/tmdb-movies2/)
# ============================================================

CACHE_DIR: Final[Path] = _resolve_dir(_get_env_str("CACHE_DIR", "cache") or "cache", relative_to=PROJECT_DIR)

# ============================================================
# Logger a fichero (opcional)
# ============================================================

LOGGER_FILE_ENABLED: bool = _get_env_bool("LOGGER_FILE_ENABLED", False)

_log_file_raw = _get_env_str("LOGGER_FILE_PATH")
LOGGER_FILE_PATH: Path | None = None
if LOGGER_FILE_ENABLED:
    LOGGER_FILE_PATH = _resolve_dir(_log_file_raw or "logs/tmdb_movies.log", relative_to=PROJECT_DIR)

LOGGER_LOG_LINE_MAX_CHARS: int = _cap_int(
    "LOGGER_LOG_LINE_MAX_CHARS",
    _get_env_int("LOGGER_LOG_LINE_MAX_CHARS", 500),
    min_v=40,
    max_v=100_000,
)

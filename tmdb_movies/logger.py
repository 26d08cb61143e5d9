from __future__ import annotations

"""
tmdb_movies/logger.py

Fachada de logging del paquete.

- debug / info / warning respetan SILENT_MODE salvo `always=True`; error nunca se calla.
- progress escribe en stdout sin formato (resultados de la CLI, estado global).
- debug_ctx(tag, msg) solo emite con DEBUG_MODE; en SILENT+DEBUG sale por progress.

La configuración se lee de `tmdb_movies.config_base` vía `sys.modules` (solo si
ya está importado), para no crear un import circular. Con LOGGER_FILE_ENABLED
se duplica todo a LOGGER_FILE_PATH (la variable de entorno manda sobre config).
Un fallo de logging nunca interrumpe una lookup.
"""

import logging
import os
import sys
import threading
from types import TracebackType
from typing import Final, Mapping, TypedDict

from typing_extensions import TypeAlias, Unpack

ExcInfo: TypeAlias = bool | tuple[type[BaseException], BaseException, TracebackType | None] | BaseException | None


class LogKwargs(TypedDict, total=False):
    exc_info: ExcInfo
    stack_info: bool
    stacklevel: int
    extra: Mapping[str, object] | None


LOGGER_NAME: Final[str] = "tmdb_movies"
_CONFIG_MODULE: Final[str] = "tmdb_movies.config_base"
_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_FILE_HANDLER_ATTR: Final[str] = "_tmdb_movies_file"
_DEFAULT_LINE_MAX: Final[int] = 500

_LEVELS: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logger: logging.Logger | None = None
_file_lock = threading.Lock()


def _cfg(name: str, default: object = None) -> object:
    mod = sys.modules.get(_CONFIG_MODULE)
    if mod is None:
        return default
    return getattr(mod, name, default)


def is_silent_mode() -> bool:
    return bool(_cfg("SILENT_MODE", False))


def is_debug_mode() -> bool:
    return bool(_cfg("DEBUG_MODE", False))


def _resolve_level_from_config() -> int:
    """LOG_LEVEL explícito > DEBUG_MODE > INFO."""
    raw = _cfg("LOG_LEVEL")
    if isinstance(raw, str) and raw.strip().upper() in _LEVELS:
        return _LEVELS[raw.strip().upper()]
    return logging.DEBUG if is_debug_mode() else logging.INFO


def _log_file_path() -> str | None:
    if not _cfg("LOGGER_FILE_ENABLED", False):
        return None
    path = (os.getenv("LOGGER_FILE_PATH") or "").strip() or _cfg("LOGGER_FILE_PATH")
    return str(path) if path else None


def _sync_file_handler(root: logging.Logger, level: int) -> None:
    path = _log_file_path()
    if path is None:
        return

    existing = [h for h in root.handlers if getattr(h, _FILE_HANDLER_ATTR, False)]
    if existing:
        existing[0].setLevel(level)
        return

    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8", delay=True)
    except OSError:
        return
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT))
    setattr(handler, _FILE_HANDLER_ATTR, True)
    root.addHandler(handler)


def _ensure_configured() -> logging.Logger:
    """Idempotente: re-aplica el nivel en cada llamada por si cambió la config."""
    global _logger

    level = _resolve_level_from_config()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_FORMAT)
    root.setLevel(level)

    if not _cfg("HTTP_DEBUG", False):
        for name in ("urllib3", "requests"):
            logging.getLogger(name).setLevel(logging.WARNING)

    _sync_file_handler(root, level)

    if _logger is None:
        _logger = logging.getLogger(LOGGER_NAME)
    return _logger


def get_logger() -> logging.Logger:
    return _ensure_configured()


def progress(message: str) -> None:
    try:
        sys.stdout.write(f"{message}\n")
        sys.stdout.flush()
    except (OSError, ValueError):
        pass

    path = _log_file_path()
    if path is None:
        return
    try:
        with _file_lock, open(path, "a", encoding="utf-8") as f:
            f.write(f"{message}\n")
    except OSError:
        pass


def _emit(method: str, msg: str, args: tuple[object, ...], kwargs: LogKwargs) -> None:
    try:
        getattr(_ensure_configured(), method)(msg, *args, **kwargs)
    except Exception:
        pass


def debug(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if always or not is_silent_mode():
        _emit("debug", msg, args, kwargs)


def info(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if always or not is_silent_mode():
        _emit("info", msg, args, kwargs)


def warning(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if always or not is_silent_mode():
        _emit("warning", msg, args, kwargs)


def error(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    _emit("error", msg, args, kwargs)


def truncate_line(text: str, max_chars: int | None = None) -> str:
    limit = max_chars if isinstance(max_chars, int) and max_chars > 0 else None
    if limit is None:
        try:
            limit = int(_cfg("LOGGER_LOG_LINE_MAX_CHARS", _DEFAULT_LINE_MAX))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            limit = _DEFAULT_LINE_MAX
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 12)] + " …(truncated)"


def debug_ctx(tag: str, msg: object) -> None:
    if not is_debug_mode():
        return

    line = f"[{(tag or 'DEBUG').strip().upper()}][DEBUG] {truncate_line(str(msg))}"
    if is_silent_mode():
        progress(line)
    else:
        info(line)

from __future__ import annotations

"""
tmdb_movies/metrics.py

Contadores locales (thread-safe) + resumen por logger al final de un run.
Sin exportador: es telemetría para diagnóstico, no observabilidad.
"""

from collections.abc import Mapping
from threading import RLock

from tmdb_movies import logger

_LOCK = RLock()
_METRICS: dict[str, int] = {
    "http_requests": 0,
    "http_failures": 0,
    "http_not_found": 0,
    "cache_hits": 0,
    "cache_misses": 0,
    "cache_writes": 0,
    "cache_corrupt": 0,
    "fallback_fetches": 0,
    "fallback_failures": 0,
    "settings_fetches": 0,
    "text_searches": 0,
}


def inc(name: str, value: int = 1) -> None:
    with _LOCK:
        _METRICS[name] = _METRICS.get(name, 0) + value


def snapshot() -> dict[str, int]:
    with _LOCK:
        return dict(_METRICS)


def reset() -> None:
    with _LOCK:
        for k in list(_METRICS.keys()):
            _METRICS[k] = 0


def _format_top(snap: Mapping[str, int], top_n: int) -> list[tuple[str, int]]:
    """Top-N por valor desc (estable por key), sin ceros."""
    items = [(k, v) for k, v in snap.items() if v]
    items.sort(key=lambda kv: (-kv[1], kv[0]))
    return items[: max(1, top_n)]


def log_summary(*, top_n: int = 12, force: bool = False) -> None:
    snap = snapshot()
    top = _format_top(snap, top_n)
    if not top and not force:
        return

    lines = ["[TMDB][METRICS] summary"]
    if not top:
        lines.append("  (all zeros)")
    else:
        width = max(len(k) for k, _ in top)
        lines.extend(f"  {k.ljust(width)} : {v}" for k, v in top)

    for ln in lines:
        logger.info(ln)

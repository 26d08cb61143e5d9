from __future__ import annotations

import asyncio
import threading
from typing import Protocol

from tmdb_movies import logger
from tmdb_movies import metrics
from tmdb_movies.models import SettingsSnapshot


class ConfigurationSource(Protocol):
    async def fetch_configuration(self) -> SettingsSnapshot: ...


class TmdbSettingsResolver:
    """
    Memoiza /3/configuration para toda la vida del proceso.

    Single-flight: N callers concurrentes en frío => 1 sola petición remota y
    todos reciben el mismo snapshot. Un fallo deja el slot vacío (el siguiente
    caller reintenta). Sin TTL ni invalidación.

    El asyncio.Lock se crea en el primer get() de cada event loop, así el
    resolver sobrevive a varios asyncio.run() sucesivos.

    Se pasa por referencia a quien lo necesite; no hay singleton de módulo.
    """

    def __init__(self, source: ConfigurationSource) -> None:
        self._source = source
        self._snapshot: SettingsSnapshot | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_guard = threading.Lock()

    @property
    def cached(self) -> SettingsSnapshot | None:
        return self._snapshot

    def _loop_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        with self._lock_guard:
            if self._lock is None or self._loop is not loop:
                self._loop = loop
                self._lock = asyncio.Lock()
            return self._lock

    async def get(self) -> SettingsSnapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        async with self._loop_lock():
            if self._snapshot is not None:
                return self._snapshot

            metrics.inc("settings_fetches", 1)
            snapshot = await self._source.fetch_configuration()
            logger.debug_ctx("TMDB", f"settings resolved (image base={snapshot.image_url()!r})")
            self._snapshot = snapshot
            return snapshot

from __future__ import annotations

"""
tmdb_movies/tmdb_client.py

Cliente HTTP de TMDb (API v3) para un único recurso por llamada.

🧠 Principios
-------------
1) Una identidad fija:
   - requests.Session compartida con User-Agent + Accept fijos.
   - api_key en todas las peticiones (sin negociación por llamada).

2) 404 NO es un error:
   - fetch_movie devuelve NOT_FOUND (valor) cuando el id ya no resuelve.
   - Cualquier otro status no exitoso => RemoteError(status_code).
   - Fallos de transporte (DNS, conexión, timeout) => NetworkError.

3) Async por fuera, requests por dentro:
   - Cada método público es `async` y ejecuta la llamada bloqueante en un
     worker thread (asyncio.to_thread).
   - Cancelar la task propaga CancelledError tal cual; la respuesta del thread
     se descarta (el timeout del transporte acota cuánto sigue viva).

4) Retry solo a nivel transporte:
   - urllib3 Retry para 429/5xx (respeta Retry-After). Nada más se reintenta.
"""

import asyncio
import json
import threading
from collections.abc import Mapping
from typing import Final, cast
from urllib.parse import urlencode

import requests  # type: ignore[import-not-found]
from requests.adapters import HTTPAdapter  # type: ignore[import-not-found]
from requests.exceptions import RequestException  # type: ignore[import-not-found]
from urllib3.util.retry import Retry  # type: ignore[import-not-found]

from tmdb_movies import logger
from tmdb_movies import metrics
from tmdb_movies.config_tmdb import TmdbClientSettings
from tmdb_movies.errors import NOT_FOUND, NetworkError, NotFound, RemoteError, TmdbConfigError
from tmdb_movies.models import MovieRecord, SettingsSnapshot

MOVIE_APPEND_TO_RESPONSE: Final[str] = "casts,releases,images,keywords,trailers"

_MOVIE_PATH: Final[str] = "3/movie/{id}"
_CONFIGURATION_PATH: Final[str] = "3/configuration"
_SEARCH_MOVIE_PATH: Final[str] = "3/search/movie"

_ACCEPT_HEADER: Final[str] = "application/json"
_BODY_SNIPPET_MAX: Final[int] = 400


def _dbg(msg: object) -> None:
    logger.debug_ctx("TMDB", msg)


def _redacted_url(url: str, params: Mapping[str, str]) -> str:
    """URL para logs/errores sin exponer la api_key."""
    safe = {k: ("***" if k == "api_key" else v) for k, v in params.items()}
    return f"{url}?{urlencode(safe, safe=',')}" if safe else url


class TmdbClient:
    def __init__(
        self,
        settings: TmdbClientSettings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings or TmdbClientSettings.from_env()
        self._session = session
        self._session_lock = threading.Lock()

    @property
    def settings(self) -> TmdbClientSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Session (lazy-init thread-safe)
    # ------------------------------------------------------------------

    def _get_session(self) -> requests.Session:
        """
        Session con retries de urllib3 y pool ajustado a la concurrencia
        esperada (si el pool es menor, las lookups en paralelo se serializan).
        """
        if self._session is not None:
            return self._session

        with self._session_lock:
            if self._session is not None:
                return self._session

            s = self._settings
            session = requests.Session()

            retries = Retry(
                total=max(0, int(s.retry_total)),
                backoff_factor=max(0.0, float(s.retry_backoff_factor)),
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=("GET",),
                raise_on_status=False,
                respect_retry_after_header=True,
            )
            pool_size = max(1, int(s.pool_size))
            adapter = HTTPAdapter(max_retries=retries, pool_connections=pool_size, pool_maxsize=pool_size)
            session.mount("https://", adapter)
            session.mount("http://", adapter)

            session.headers.update(
                {
                    "User-Agent": s.user_agent,
                    "Accept": _ACCEPT_HEADER,
                }
            )

            self._session = session
            return session

    def close(self) -> None:
        with self._session_lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    # ------------------------------------------------------------------
    # Núcleo HTTP (bloqueante)
    # ------------------------------------------------------------------

    def _require_api_key(self) -> str:
        api_key = (self._settings.api_key or "").strip()
        if not api_key:
            raise TmdbConfigError("TMDB_API_KEY is not set.")
        return api_key

    def _url(self, path: str) -> str:
        base = self._settings.base_url.strip() or "https://api.themoviedb.org/"
        if not base.endswith("/"):
            base += "/"
        return base + path

    def _get_json_sync(
        self,
        path: str,
        params: Mapping[str, str],
        *,
        not_found_ok: bool = False,
    ) -> dict[str, object] | NotFound:
        req_params: dict[str, str] = {"api_key": self._require_api_key()}
        req_params.update(params)

        url = self._url(path)
        shown = _redacted_url(url, req_params)
        timeout = max(0.5, float(self._settings.timeout_seconds))

        metrics.inc("http_requests", 1)
        _dbg(f"GET {shown}")

        try:
            resp = self._get_session().get(url, params=req_params, timeout=timeout)
        except RequestException as exc:
            metrics.inc("http_failures", 1)
            raise NetworkError(f"TMDb request failed: {exc!r}", url=shown) from exc

        if resp.status_code == 404 and not_found_ok:
            metrics.inc("http_not_found", 1)
            _dbg(f"404 for {shown}")
            return NOT_FOUND

        if not (200 <= resp.status_code < 300):
            metrics.inc("http_failures", 1)
            if resp.status_code == 401:
                logger.warning("TMDb rejected the API key (HTTP 401). Check TMDB_API_KEY.", always=True)
            raise RemoteError(
                f"TMDb request failed with HTTP {resp.status_code}.",
                status_code=resp.status_code,
                body_snippet=(resp.text or "")[:_BODY_SNIPPET_MAX],
                url=shown,
            )

        try:
            payload = resp.json()
        except (ValueError, json.JSONDecodeError) as exc:
            metrics.inc("http_failures", 1)
            raise RemoteError(
                "TMDb returned non-JSON response.",
                status_code=resp.status_code,
                body_snippet=(resp.text or "")[:_BODY_SNIPPET_MAX],
                url=shown,
            ) from exc

        if not isinstance(payload, dict):
            metrics.inc("http_failures", 1)
            raise RemoteError(
                "TMDb returned unexpected JSON shape (not an object).",
                status_code=resp.status_code,
                url=shown,
            )

        return payload

    # ------------------------------------------------------------------
    # API pública (async)
    # ------------------------------------------------------------------

    async def fetch_movie(
        self,
        tmdb_id: str,
        language: str | None,
        image_languages: str | None,
    ) -> MovieRecord | NotFound:
        """
        GET /3/movie/{id} con casts, releases, images, keywords y trailers en
        una sola llamada. `language` llega ya normalizado (o vacío).
        """
        params: dict[str, str] = {"append_to_response": MOVIE_APPEND_TO_RESPONSE}
        if language:
            params["language"] = language
        if image_languages:
            params["include_image_language"] = image_languages

        payload = await asyncio.to_thread(
            self._get_json_sync,
            _MOVIE_PATH.format(id=tmdb_id),
            params,
            not_found_ok=True,
        )
        if payload is NOT_FOUND:
            return NOT_FOUND
        return cast(MovieRecord, payload)

    async def fetch_configuration(self) -> SettingsSnapshot:
        payload = await asyncio.to_thread(self._get_json_sync, _CONFIGURATION_PATH, {})
        return SettingsSnapshot.from_payload(cast(dict, payload))

    async def search_movies(
        self,
        query: str,
        *,
        year: int | None = None,
        language: str | None = None,
    ) -> list[dict[str, object]]:
        params: dict[str, str] = {"query": query}
        if year is not None:
            params["year"] = str(year)
        if language:
            params["language"] = language

        payload = cast(dict, await asyncio.to_thread(self._get_json_sync, _SEARCH_MOVIE_PATH, params))
        results = payload.get("results")
        if not isinstance(results, list):
            return []
        return [r for r in results if isinstance(r, dict)]

from __future__ import annotations

from pathlib import Path
from typing import Final


class TmdbError(Exception):
    """Base de los errores del paquete."""


class InvalidArgumentError(TmdbError, ValueError):
    pass


class TmdbConfigError(TmdbError):
    """Falta configuración imprescindible (p.ej. TMDB_API_KEY)."""


class RemoteError(TmdbError):
    """TMDb respondió con un status no exitoso distinto de 404."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body_snippet: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet
        self.url = url


class NetworkError(TmdbError):
    """Fallo de transporte: DNS, conexión rechazada, timeout."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class CorruptCacheError(TmdbError):
    """La entrada existe en disco pero no se puede parsear."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


class NotFound:
    """
    Resultado "id no resoluble" (HTTP 404).

    No es una excepción: es un valor esperado y frecuente. Se usa la instancia
    única NOT_FOUND y es falsy para poder escribir `if not result:`.
    """

    _instance: "NotFound | None" = None

    def __new__(cls) -> "NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND: Final[NotFound] = NotFound()

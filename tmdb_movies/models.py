from __future__ import annotations

"""
tmdb_movies/models.py

Tipos del core:

- MovieRecord: respuesta de /3/movie/{id} tal cual (dict JSON). Solo se tipan
  los campos que inspeccionamos; el resto viaja opaco dentro del snapshot.
- SettingsSnapshot: /3/configuration (base URL de imágenes).
- SearchCandidate: proyección ligera para desambiguar (nunca se persiste).
- MovieLookupInfo: petición de búsqueda (nombre/año/idioma/ids conocidos).
- MovieMetadata / PersonInfo: forma estructurada para hosts que no quieren
  trabajar con el dict crudo.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, TypedDict

PROVIDER_NAME: Final[str] = "TheMovieDb"

# Claves de provider_ids
PROVIDER_TMDB: Final[str] = "Tmdb"
PROVIDER_IMDB: Final[str] = "Imdb"


class MovieRecord(TypedDict, total=False):
    """Snapshot de /3/movie/{id}?append_to_response=casts,releases,images,keywords,trailers."""

    id: int
    imdb_id: str | None
    title: str
    original_title: str
    name: str
    overview: str | None
    tagline: str | None
    release_date: str | None
    poster_path: str | None
    backdrop_path: str | None
    vote_average: float
    runtime: int | None
    genres: list[dict[str, object]]
    production_companies: list[dict[str, object]]
    production_countries: list[dict[str, object]]
    belongs_to_collection: dict[str, object] | None
    casts: dict[str, object]
    releases: dict[str, object]
    images: dict[str, object]
    keywords: dict[str, object]
    trailers: dict[str, object]


@dataclass(frozen=True)
class SettingsSnapshot:
    """Configuración global de TMDb (estable durante la vida del proceso)."""

    base_url: str
    secure_base_url: str
    poster_sizes: tuple[str, ...] = ()
    backdrop_sizes: tuple[str, ...] = ()
    profile_sizes: tuple[str, ...] = ()
    still_sizes: tuple[str, ...] = ()

    def image_url(self, size: str = "original") -> str:
        """Prefijo de URL de imagen: "<secure_base_url><size>"."""
        base = self.secure_base_url or self.base_url
        return f"{base}{size}"

    @staticmethod
    def from_payload(payload: Mapping[str, object]) -> "SettingsSnapshot":
        images = payload.get("images")
        if not isinstance(images, Mapping):
            images = {}

        def _sizes(key: str) -> tuple[str, ...]:
            raw = images.get(key)
            if not isinstance(raw, list):
                return ()
            return tuple(str(s) for s in raw if isinstance(s, str))

        base_url = images.get("base_url")
        secure_base_url = images.get("secure_base_url")
        return SettingsSnapshot(
            base_url=base_url if isinstance(base_url, str) else "",
            secure_base_url=secure_base_url if isinstance(secure_base_url, str) else "",
            poster_sizes=_sizes("poster_sizes"),
            backdrop_sizes=_sizes("backdrop_sizes"),
            profile_sizes=_sizes("profile_sizes"),
            still_sizes=_sizes("still_sizes"),
        )


@dataclass(frozen=True)
class SearchCandidate:
    name: str | None
    provider_ids: dict[str, str] = field(default_factory=dict)
    image_url: str | None = None
    premiere_date: datetime | None = None
    production_year: int | None = None
    overview: str | None = None
    search_provider_name: str = PROVIDER_NAME


@dataclass(frozen=True)
class MovieLookupInfo:
    name: str | None = None
    year: int | None = None
    metadata_language: str | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)

    @property
    def tmdb_id(self) -> str | None:
        raw = self.provider_ids.get(PROVIDER_TMDB)
        if raw is None:
            return None
        s = str(raw).strip()
        return s or None


@dataclass(frozen=True)
class PersonInfo:
    name: str
    kind: str  # Actor | Director | Writer | Producer
    role: str | None = None
    sort_order: int | None = None
    tmdb_id: str | None = None
    image_path: str | None = None


@dataclass(frozen=True)
class MovieMetadata:
    name: str | None
    original_title: str | None = None
    overview: str | None = None
    tagline: str | None = None
    premiere_date: datetime | None = None
    production_year: int | None = None
    community_rating: float | None = None
    runtime_minutes: int | None = None
    official_rating: str | None = None
    collection_name: str | None = None
    poster_path: str | None = None  # mejor poster para el idioma pedido
    genres: tuple[str, ...] = ()
    studios: tuple[str, ...] = ()
    production_locations: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    trailers: tuple[str, ...] = ()
    people: tuple[PersonInfo, ...] = ()
    provider_ids: dict[str, str] = field(default_factory=dict)

from __future__ import annotations

"""
tmdb_movies/mapping.py

Funciones de mapeo MovieRecord -> formas de resultado.

El fetch/caché devuelve siempre el MovieRecord crudo (independiente del
idioma de presentación); aquí hay una función explícita por forma destino:

- to_search_candidate: proyección ligera para desambiguación.
- to_movie_metadata: ficha estructurada (géneros, estudios, reparto, rating…).
- best_poster: selección del poster localizado más adecuado.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from tmdb_movies.language import adjust_image_language, normalize_language
from tmdb_movies.models import (
    PROVIDER_IMDB,
    PROVIDER_TMDB,
    MovieMetadata,
    PersonInfo,
    SearchCandidate,
)

# TMDb siempre devuelve las fechas en este formato exacto.
RELEASE_DATE_FORMAT = "%Y-%m-%d"

_CREW_JOBS: dict[str, str] = {
    "Director": "Director",
    "Screenplay": "Writer",
    "Writer": "Writer",
    "Producer": "Producer",
}


def _str_or_none(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    v = value.strip()
    return v or None


def _names(items: object) -> tuple[str, ...]:
    if not isinstance(items, list):
        return ()
    out: list[str] = []
    for it in items:
        if isinstance(it, Mapping):
            name = _str_or_none(it.get("name"))
            if name:
                out.append(name)
    return tuple(out)


def parse_release_date(value: object) -> datetime | None:
    """"1999-10-15" -> datetime UTC. Cualquier otra cosa => None (nunca lanza)."""
    raw = _str_or_none(value)
    if raw is None:
        return None
    try:
        return datetime.strptime(raw, RELEASE_DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def record_title(record: Mapping[str, object]) -> str | None:
    return (
        _str_or_none(record.get("title"))
        or _str_or_none(record.get("name"))
        or _str_or_none(record.get("original_title"))
    )


def record_provider_ids(record: Mapping[str, object]) -> dict[str, str]:
    """Tmdb siempre; Imdb solo si viene y no está en blanco."""
    ids: dict[str, str] = {}
    tmdb_id = record.get("id")
    if tmdb_id is not None and str(tmdb_id).strip():
        ids[PROVIDER_TMDB] = str(tmdb_id).strip()
    imdb_id = _str_or_none(record.get("imdb_id"))
    if imdb_id:
        ids[PROVIDER_IMDB] = imdb_id
    return ids


def to_search_candidate(record: Mapping[str, object], image_base_url: str | None) -> SearchCandidate:
    premiere = parse_release_date(record.get("release_date"))
    poster_path = _str_or_none(record.get("poster_path"))

    return SearchCandidate(
        name=record_title(record),
        provider_ids=record_provider_ids(record),
        image_url=(f"{image_base_url or ''}{poster_path}" if poster_path else None),
        premiere_date=premiere,
        production_year=premiere.year if premiere else None,
        overview=_str_or_none(record.get("overview")),
    )


# ============================================================
# Imágenes
# ============================================================


def _image_rank(image_language: str | None, language: str | None) -> int:
    """0 = idioma pedido, 1 = sin idioma, 2 = inglés, 3 = resto."""
    adjusted = adjust_image_language(image_language, language)
    if language and adjusted and adjusted.lower() == language.lower():
        return 0
    if not image_language:
        return 1
    if image_language.lower() == "en":
        return 2
    return 3


def best_poster(record: Mapping[str, object], language: str | None) -> str | None:
    """
    file_path del mejor poster de images.posters para `language`.
    Orden: idioma pedido > sin idioma > inglés > resto; dentro, vote_average desc.
    Sin posters => poster_path del record.
    """
    images = record.get("images")
    posters = images.get("posters") if isinstance(images, Mapping) else None
    normalized = normalize_language(language)

    ranked: list[tuple[int, float, str]] = []
    if isinstance(posters, list):
        for p in posters:
            if not isinstance(p, Mapping):
                continue
            path = _str_or_none(p.get("file_path"))
            if path is None:
                continue
            lang = _str_or_none(p.get("iso_639_1"))
            try:
                votes = float(p.get("vote_average") or 0.0)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                votes = 0.0
            ranked.append((_image_rank(lang, normalized), -votes, path))

    if ranked:
        ranked.sort(key=lambda t: (t[0], t[1]))
        return ranked[0][2]
    return _str_or_none(record.get("poster_path"))


# ============================================================
# Ficha completa
# ============================================================


def _official_rating(record: Mapping[str, object], language: str | None) -> str | None:
    """
    Certificación de releases.countries para la región del idioma
    ("de-DE" -> DE); fallback US.
    """
    releases = record.get("releases")
    countries = releases.get("countries") if isinstance(releases, Mapping) else None
    if not isinstance(countries, list):
        return None

    normalized = normalize_language(language) or ""
    region = normalized.split("-", 1)[1] if "-" in normalized else ""

    by_country: dict[str, str] = {}
    for c in countries:
        if not isinstance(c, Mapping):
            continue
        iso = _str_or_none(c.get("iso_3166_1"))
        cert = _str_or_none(c.get("certification"))
        if iso and cert and iso.upper() not in by_country:
            by_country[iso.upper()] = cert

    if region and region in by_country:
        cert = by_country[region]
        # Fuera de US se prefija el país: "DE-12".
        return cert if region == "US" else f"{region}-{cert}"
    return by_country.get("US")


def _people(casts: object) -> tuple[PersonInfo, ...]:
    if not isinstance(casts, Mapping):
        return ()

    out: list[PersonInfo] = []

    cast_list = casts.get("cast")
    if isinstance(cast_list, list):
        actors = [c for c in cast_list if isinstance(c, Mapping) and _str_or_none(c.get("name"))]
        actors.sort(key=lambda c: c.get("order") if isinstance(c.get("order"), int) else 1_000_000)
        for c in actors:
            out.append(
                PersonInfo(
                    name=str(c.get("name")).strip(),
                    kind="Actor",
                    role=_str_or_none(c.get("character")),
                    sort_order=c.get("order") if isinstance(c.get("order"), int) else None,
                    tmdb_id=str(c.get("id")) if c.get("id") is not None else None,
                    image_path=_str_or_none(c.get("profile_path")),
                )
            )

    crew_list = casts.get("crew")
    if isinstance(crew_list, list):
        for c in crew_list:
            if not isinstance(c, Mapping):
                continue
            name = _str_or_none(c.get("name"))
            kind = _CREW_JOBS.get(str(c.get("job") or ""))
            if name is None or kind is None:
                continue
            out.append(
                PersonInfo(
                    name=name,
                    kind=kind,
                    role=_str_or_none(c.get("job")),
                    tmdb_id=str(c.get("id")) if c.get("id") is not None else None,
                    image_path=_str_or_none(c.get("profile_path")),
                )
            )

    return tuple(out)


def _trailers(record: Mapping[str, object]) -> tuple[str, ...]:
    trailers = record.get("trailers")
    youtube = trailers.get("youtube") if isinstance(trailers, Mapping) else None
    if not isinstance(youtube, list):
        return ()
    urls: list[str] = []
    for t in youtube:
        if not isinstance(t, Mapping):
            continue
        source = _str_or_none(t.get("source"))
        if source:
            urls.append(f"https://www.youtube.com/watch?v={source}")
    return tuple(urls)


def _keywords(record: Mapping[str, object]) -> tuple[str, ...]:
    keywords = record.get("keywords")
    if not isinstance(keywords, Mapping):
        return ()
    return _names(keywords.get("keywords"))


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return tuple(out)


def to_movie_metadata(record: Mapping[str, object], language: str | None) -> MovieMetadata:
    premiere = parse_release_date(record.get("release_date"))

    rating: float | None
    try:
        rating = float(record["vote_average"]) if record.get("vote_average") is not None else None  # type: ignore[arg-type]
    except (TypeError, ValueError):
        rating = None

    runtime = record.get("runtime")
    collection = record.get("belongs_to_collection")

    title = record_title(record)
    original = _str_or_none(record.get("original_title"))

    return MovieMetadata(
        name=title,
        original_title=original if original != title else None,
        overview=_str_or_none(record.get("overview")),
        tagline=_str_or_none(record.get("tagline")),
        premiere_date=premiere,
        production_year=premiere.year if premiere else None,
        community_rating=rating,
        runtime_minutes=runtime if isinstance(runtime, int) and runtime > 0 else None,
        official_rating=_official_rating(record, language),
        collection_name=_str_or_none(collection.get("name")) if isinstance(collection, Mapping) else None,
        poster_path=best_poster(record, language),
        genres=_names(record.get("genres")),
        studios=_names(record.get("production_companies")),
        production_locations=_names(record.get("production_countries")),
        tags=_dedupe(_keywords(record)),
        trailers=_trailers(record),
        people=_people(record.get("casts")),
        provider_ids=record_provider_ids(record),
    )


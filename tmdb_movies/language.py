from __future__ import annotations

"""
tmdb_movies/language.py

Normalización de tags de idioma al formato que espera TMDb.

TMDb exige la región en mayúsculas ("pt-BR", no "pt-br") y solo soporta
códigos de 2 letras para imágenes, así que para un tag con región pedimos
también su idioma base.
"""

from typing import Final

# Marcador de TMDb para "imagen sin idioma" (posters sin texto).
NO_LANGUAGE: Final[str] = "null"
ENGLISH: Final[str] = "en"


def normalize_language(language: str | None) -> str | None:
    """
    "en-us" -> "en-US". Solo se toca la parte de región; sin guion (o con más
    de uno) se devuelve tal cual. None / "" se devuelven sin cambios.
    """
    if not language:
        return language

    parts = language.split("-")
    if len(parts) == 2:
        return f"{parts[0]}-{parts[1].upper()}"
    return language


def base_language(language: str | None) -> str:
    """Idioma base en minúsculas ("pt-BR" -> "pt"); "" si no hay tag."""
    if not language:
        return ""
    return language.strip().split("-", 1)[0].lower()


def image_languages_list(preferred_language: str | None) -> list[str]:
    """
    Cadena de fallback para include_image_language, en este orden:

      1) idioma preferido normalizado
      2) su prefijo de 2 letras si es un tag de 5 ("fr-FR" -> "fr")
      3) "null" (imágenes sin idioma)
      4) "en", salvo que el preferido ya sea inglés
    """
    languages: list[str] = []
    normalized = normalize_language(preferred_language) or ""

    if normalized:
        languages.append(normalized)
        if len(normalized) == 5:
            languages.append(normalized[:2])

    languages.append(NO_LANGUAGE)

    if base_language(normalized) != ENGLISH:
        languages.append(ENGLISH)

    return languages


def image_languages_param(preferred_language: str | None) -> str:
    """Versión serializada para la query string: "fr-FR,fr,null,en"."""
    return ",".join(image_languages_list(preferred_language))


def adjust_image_language(image_language: str | None, request_language: str | None) -> str | None:
    """
    Promociona un match de idioma base al tag completo pedido:
    ("en", "en-US") -> "en-US"; ("fr", "en-US") -> "fr".
    """
    if (
        image_language
        and request_language
        and len(request_language) > 2
        and len(image_language) == 2
        and request_language.lower().startswith(image_language.lower())
    ):
        return request_language
    return image_language


def is_english(language: str | None) -> bool:
    """True solo para "en" exacto (case-insensitive); "en-GB" no cuenta."""
    return (language or "").strip().lower() == ENGLISH

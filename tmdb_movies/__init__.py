from __future__ import annotations

from tmdb_movies.errors import (
    NOT_FOUND,
    CorruptCacheError,
    InvalidArgumentError,
    NetworkError,
    NotFound,
    RemoteError,
    TmdbConfigError,
    TmdbError,
)
from tmdb_movies.mapping import to_movie_metadata, to_search_candidate
from tmdb_movies.models import MovieLookupInfo, MovieMetadata, MovieRecord, SearchCandidate
from tmdb_movies.movie_provider import TmdbMovieProvider

__all__ = [
    "NOT_FOUND",
    "CorruptCacheError",
    "InvalidArgumentError",
    "MovieLookupInfo",
    "MovieMetadata",
    "MovieRecord",
    "NetworkError",
    "NotFound",
    "RemoteError",
    "SearchCandidate",
    "TmdbConfigError",
    "TmdbError",
    "TmdbMovieProvider",
    "to_movie_metadata",
    "to_search_candidate",
]

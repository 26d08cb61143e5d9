from __future__ import annotations

"""
tmdb_movies/main.py

CLI mínima sobre TmdbMovieProvider (console_script `tmdb-movies`).

Subcomandos
-----------
- lookup   --id ID [--lang L]              -> candidato (JSON) o null
- metadata --id ID [--lang L] [--raw]      -> ficha estructurada (o registro crudo)
- search   --query Q [--year Y] [--lang L] -> lista de candidatos

Reglas de consola (alineado con tmdb_movies/logger.py)
-----------------------------------------------------
- Resultado JSON: logger.progress(...) (siempre visible).
- Errores de TMDb: logger.error(..., always=True) y exit 1.
- Ctrl+C: salida limpia con código 130, sin stacktrace.
"""

import argparse
import asyncio
import json
from collections.abc import Sequence
from dataclasses import asdict, is_dataclass

from tmdb_movies import logger
from tmdb_movies import metrics
from tmdb_movies.config_tmdb import TMDB_METRICS_ENABLED
from tmdb_movies.errors import NOT_FOUND, TmdbError
from tmdb_movies.models import MovieLookupInfo
from tmdb_movies.movie_provider import TmdbMovieProvider


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmdb-movies",
        description="TMDb movie metadata (cache-first) - CLI",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_lookup = sub.add_parser("lookup", help="Candidato para un id de TMDb")
    p_lookup.add_argument("--id", dest="tmdb_id", required=True)
    p_lookup.add_argument("--lang", default=None)

    p_meta = sub.add_parser("metadata", help="Ficha completa para un id de TMDb")
    p_meta.add_argument("--id", dest="tmdb_id", required=True)
    p_meta.add_argument("--lang", default=None)
    p_meta.add_argument("--raw", action="store_true", help="Registro TMDb tal cual está en caché")

    p_search = sub.add_parser("search", help="Búsqueda por texto")
    p_search.add_argument("--query", required=True)
    p_search.add_argument("--year", type=int, default=None)
    p_search.add_argument("--lang", default=None)

    return parser


def _to_jsonable(value: object) -> object:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


def _emit(value: object) -> None:
    logger.progress(json.dumps(_to_jsonable(value), ensure_ascii=False, indent=2, default=str))


async def _run(args: argparse.Namespace, provider: TmdbMovieProvider) -> None:
    if args.command == "lookup":
        _emit(await provider.lookup(args.tmdb_id, args.lang))
        return

    if args.command == "metadata":
        if args.raw:
            record = await provider.fetch_full_metadata(args.tmdb_id, args.lang)
            _emit(None if record is NOT_FOUND else record)
        else:
            _emit(await provider.fetch_metadata(args.tmdb_id, args.lang))
        return

    info = MovieLookupInfo(name=args.query, year=args.year, metadata_language=args.lang)
    _emit(await provider.lookup_candidates(info))


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logger.debug_ctx("CLI", f"command={args.command} args={vars(args)!r}")

    provider = TmdbMovieProvider.from_settings()
    try:
        asyncio.run(_run(args, provider))
    except KeyboardInterrupt:
        logger.info("\n[TMDB] Interrumpido por el usuario (Ctrl+C).", always=True)
        return 130
    except TmdbError as exc:
        logger.error(f"[TMDB] {type(exc).__name__}: {exc}", always=True)
        return 1
    finally:
        provider.close()
        if TMDB_METRICS_ENABLED:
            metrics.log_summary()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys

from movie_catalog.catalog import DEFAULT_PROVIDER_IDS, STREAMING_PROVIDERS, SUPPORTED_COUNTRIES
from movie_catalog.config import ConfigError, load_env, load_sync_settings
from movie_catalog.db.supabase import create_supabase_admin_client
from movie_catalog.ingestion.movie_sync import MovieSyncSummary, run_movie_sync
from movie_catalog.repositories.movies import assert_movies_table_exists


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sync_streaming_movies",
        description="Sync streaming movies for one country from TMDb + OMDb into the Supabase movies table.",
    )
    parser.add_argument("--country", default="", help="ISO 3166-1 alpha-2 country code (e.g. SE).")
    parser.add_argument(
        "--providers",
        default=None,
        help="Comma-separated TMDb watch provider ids (defaults to all built-in providers).",
    )
    parser.add_argument("--workers", type=int, default=1, help="Movies processed in parallel (default: 1).")
    parser.add_argument("--dry-run", action="store_true", help="Fetch and merge without writing to Supabase.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def _parse_provider_ids(raw: str | None) -> list[int]:
    if raw is None:
        return list(DEFAULT_PROVIDER_IDS)
    out: list[int] = []
    for part in raw.split(","):
        s = part.strip()
        if s.isdigit() and int(s) not in out:
            out.append(int(s))
    return out


def _print_usage() -> None:
    print("Usage: python -m scripts.sync_streaming_movies --country=SE [--providers=8,9,337]", file=sys.stderr)
    print(f"Supported countries: {', '.join(SUPPORTED_COUNTRIES)}", file=sys.stderr)
    print("Available streaming providers:", file=sys.stderr)
    for provider_id, name in STREAMING_PROVIDERS.items():
        print(f"  {provider_id}: {name}", file=sys.stderr)


def _print_summary(summary: MovieSyncSummary) -> None:
    print(f"\n📊 Sync Complete for {summary.country}")
    print(f"   🔎 Discovered: {summary.discovered}")
    print(f"   ✅ Successful: {summary.successful}")
    print(f"   ❌ Failed: {summary.failed}")
    print(f"   📁 Total processed: {summary.processed}")
    for failure in summary.failures[:10]:
        print(f"   - {failure.tmdb_id} {failure.title!r}: {failure.message}")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    country = (args.country or "").strip().upper()
    if not country:
        _print_usage()
        return 1
    if country not in SUPPORTED_COUNTRIES:
        print(f"Note: {country} is not a supported country in the UI; syncing anyway.", file=sys.stderr)
    provider_ids = _parse_provider_ids(args.providers)
    if not provider_ids:
        print("No valid provider ids given in --providers.", file=sys.stderr)
        _print_usage()
        return 1

    load_env()
    try:
        settings = load_sync_settings(require_supabase=not args.dry_run)
    except ConfigError as exc:
        print("Missing required environment variables:", file=sys.stderr)
        for name in exc.missing:
            print(f"  - {name}", file=sys.stderr)
        return 1

    try:
        db = None
        if not args.dry_run:
            db = create_supabase_admin_client(url=settings.supabase_url, service_role_key=settings.supabase_service_key)
            assert_movies_table_exists(db)

        summary = run_movie_sync(
            settings,
            country=country,
            provider_ids=provider_ids,
            db=db,
            workers=args.workers,
            dry_run=bool(args.dry_run),
        )
    except Exception as exc:
        logging.getLogger("sync_streaming_movies").debug("Fatal error", exc_info=True)
        print(f"\n💥 Fatal error: {exc}", file=sys.stderr)
        return 1

    _print_summary(summary)
    print("\n✨ Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Iterable

import requests

from movie_catalog.catalog import LEGACY_PROVIDER_ID, describe_providers
from movie_catalog.config import SyncSettings
from movie_catalog.ingestion.discovery import discover_streaming_movies
from movie_catalog.ingestion.enrichment import fetch_details, fetch_offers, fetch_rating_data
from movie_catalog.integrations.http import build_session
from movie_catalog.integrations.tmdb.client import BACKDROP_SIZE, POSTER_SIZE, build_image_url
from movie_catalog.models.movies import CandidateRef, DetailRecord, MovieUpsert, OfferRecord, RatingRecord
from movie_catalog.repositories.movies import MovieRepositoryError, upsert_movie
from movie_catalog.utils.rate_limit import RateLimitedPool

logger = logging.getLogger(__name__)

OUTCOME_PERSISTED = "persisted"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


@dataclass(frozen=True)
class MovieSyncFailure:
    tmdb_id: int
    title: str
    message: str


@dataclass(frozen=True)
class MovieSyncSummary:
    country: str
    discovered: int
    processed: int
    successful: int
    failed: int
    failures: list[MovieSyncFailure] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_movie_upsert(
    details: DetailRecord,
    *,
    country: str,
    offers: list[OfferRecord],
    ratings: RatingRecord,
    legacy_provider_id: int = LEGACY_PROVIDER_ID,
) -> MovieUpsert:
    legacy_offer = next((offer for offer in offers if offer.provider_id == legacy_provider_id), None)
    return MovieUpsert(
        tmdb_id=details.tmdb_id,
        imdb_id=details.imdb_id,
        title=details.title,
        country=country,
        year=details.release_year,
        poster_url=build_image_url(details.poster_path, size=POSTER_SIZE),
        backdrop_url=build_image_url(details.backdrop_path, size=BACKDROP_SIZE),
        overview=details.overview,
        runtime=details.runtime,
        genres=list(details.genres) if details.genres else None,
        imdb_rating=ratings.imdb_rating,
        imdb_votes=ratings.imdb_votes,
        rotten_tomatoes_score=ratings.rotten_tomatoes_score,
        metacritic_score=ratings.metacritic_score,
        on_netflix=legacy_offer is not None,
        netflix_url=(legacy_offer.url or None) if legacy_offer is not None else None,
        streaming_providers=list(offers),
    )


def format_success_line(progress: str, movie: MovieUpsert) -> str:
    parts = [f"{progress} ✅ {movie.title} ({movie.year})"]
    parts.append(f"⭐ {movie.imdb_rating}" if movie.imdb_rating is not None else "(no rating)")
    if movie.rotten_tomatoes_score is not None:
        parts.append(f"🍅 {movie.rotten_tomatoes_score}%")
    if movie.metacritic_score is not None:
        parts.append(f"Ⓜ️ {movie.metacritic_score}")
    providers = ", ".join(offer.provider_name for offer in movie.streaming_providers) or "No providers"
    parts.append(f"[{providers}]")
    return " ".join(parts)


class _RunState:
    def __init__(self, total: int) -> None:
        self.total = total
        self.processed = 0
        self.successful = 0
        self.failed = 0
        self.failures: list[MovieSyncFailure] = []
        self.rows: list[dict[str, Any]] = []
        self._lock = Lock()

    def next_progress(self) -> str:
        with self._lock:
            self.processed += 1
            return f"[{self.processed}/{self.total}]"

    def record(
        self,
        candidate: CandidateRef,
        outcome: str,
        *,
        message: str = "",
        row: dict[str, Any] | None = None,
    ) -> None:
        with self._lock:
            if outcome == OUTCOME_PERSISTED:
                self.successful += 1
                if row is not None:
                    self.rows.append(row)
                return
            self.failed += 1
            self.failures.append(MovieSyncFailure(tmdb_id=candidate.tmdb_id, title=candidate.title, message=message))


def _sync_one_movie(
    candidate: CandidateRef,
    *,
    state: _RunState,
    settings: SyncSettings,
    country: str,
    provider_ids: list[int],
    db: Any,
    session: requests.Session,
    tmdb_pool: RateLimitedPool,
    omdb_pool: RateLimitedPool,
    dry_run: bool,
) -> None:
    http_kwargs = {
        "session": session,
        "timeout_seconds": settings.request_timeout_seconds,
        "max_attempts": settings.max_attempts,
    }
    progress = state.next_progress()
    try:
        details = fetch_details(candidate.tmdb_id, api_key=settings.tmdb_api_key, pool=tmdb_pool, **http_kwargs)
        if details is None:
            print(f'{progress} ⚠️  Skipping "{candidate.title}" - Could not fetch details')
            state.record(candidate, OUTCOME_SKIPPED, message="could not fetch details")
            return

        offers = fetch_offers(
            candidate.tmdb_id,
            country=country,
            allowed_provider_ids=provider_ids,
            api_key=settings.tmdb_api_key,
            pool=tmdb_pool,
            **http_kwargs,
        )

        ratings = RatingRecord.empty()
        if details.imdb_id:
            ratings = fetch_rating_data(details.imdb_id, api_key=settings.omdb_api_key, pool=omdb_pool, **http_kwargs)

        movie = build_movie_upsert(details, country=country, offers=offers, ratings=ratings)
        row = movie.to_row(last_updated=_now_utc_iso())

        if not dry_run:
            try:
                upsert_movie(db, row)
            except MovieRepositoryError as exc:
                print(f'{progress} ❌ Failed to save "{details.title}": {exc}')
                state.record(candidate, OUTCOME_FAILED, message=str(exc))
                return

        print(format_success_line(progress, movie))
        state.record(candidate, OUTCOME_PERSISTED, row=row)
    except Exception as exc:
        logger.exception("Unexpected error processing tmdb_id=%s", candidate.tmdb_id)
        print(f'{progress} ❌ Error processing "{candidate.title}": {exc}')
        state.record(candidate, OUTCOME_FAILED, message=str(exc))


def run_movie_sync(
    settings: SyncSettings,
    *,
    country: str,
    provider_ids: Iterable[int],
    db: Any = None,
    session: requests.Session | None = None,
    tmdb_pool: RateLimitedPool | None = None,
    omdb_pool: RateLimitedPool | None = None,
    workers: int = 1,
    dry_run: bool = False,
) -> MovieSyncSummary:
    """
    Discover, enrich and upsert every streaming movie for one country.

    Movies are processed with `workers` threads (1 keeps discovery order); TMDb and
    OMDb calls are bounded by their own pools regardless of `workers`. A movie that
    cannot be enriched or saved is counted as failed and never aborts the run.
    """

    country = (country or "").strip().upper()
    provider_ids = [int(p) for p in provider_ids]
    if not country:
        raise ValueError("country is required.")
    if not provider_ids:
        raise ValueError("at least one provider id is required.")
    if db is None and not dry_run:
        raise ValueError("db is required unless dry_run is set.")

    session = session or build_session(pool_maxsize=settings.tmdb_max_concurrent)
    tmdb_pool = tmdb_pool or RateLimitedPool("tmdb", max_concurrent=settings.tmdb_max_concurrent)
    omdb_pool = omdb_pool or RateLimitedPool(
        "omdb",
        max_concurrent=settings.omdb_max_concurrent,
        min_interval_seconds=settings.omdb_min_interval_seconds,
    )

    print(f"\n🎬 Starting sync for country: {country}")
    print(f"📺 Streaming providers: {describe_providers(provider_ids)}\n")

    raw_movies = discover_streaming_movies(
        region=country,
        provider_ids=provider_ids,
        api_key=settings.tmdb_api_key,
        session=session,
        pool=tmdb_pool,
        timeout_seconds=settings.request_timeout_seconds,
        max_attempts=settings.max_attempts,
    )
    candidates = [c for c in (CandidateRef.from_discover_result(r) for r in raw_movies) if c is not None]
    if not candidates:
        print("No movies found.")
        return MovieSyncSummary(country=country, discovered=0, processed=0, successful=0, failed=0)

    state = _RunState(total=len(candidates))

    def run_one(candidate: CandidateRef) -> None:
        _sync_one_movie(
            candidate,
            state=state,
            settings=settings,
            country=country,
            provider_ids=provider_ids,
            db=db,
            session=session,
            tmdb_pool=tmdb_pool,
            omdb_pool=omdb_pool,
            dry_run=dry_run,
        )

    workers = max(1, int(workers or 1))
    if workers == 1:
        for candidate in candidates:
            run_one(candidate)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # run_one records its own failures; result() only re-raises interpreter-level errors.
            for future in [executor.submit(run_one, c) for c in candidates]:
                future.result()

    return MovieSyncSummary(
        country=country,
        discovered=len(candidates),
        processed=state.processed,
        successful=state.successful,
        failed=state.failed,
        failures=list(state.failures),
        rows=list(state.rows),
    )

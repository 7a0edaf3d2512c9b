from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import requests

from movie_catalog.catalog import STREAMING_PROVIDERS, provider_label
from movie_catalog.integrations.http import DEFAULT_TIMEOUT_SECONDS
from movie_catalog.integrations.omdb.client import (
    METACRITIC_SOURCE,
    ROTTEN_TOMATOES_SOURCE,
    OmdbClientError,
    fetch_title_by_imdb_id,
    is_found,
)
from movie_catalog.integrations.tmdb.client import (
    TmdbClientError,
    fetch_movie_details,
    fetch_movie_watch_providers,
)
from movie_catalog.models.movies import DetailRecord, OfferRecord, RatingRecord
from movie_catalog.utils.parsing import (
    parse_float_or_none,
    parse_int_or_none,
    parse_out_of_100,
    parse_percent,
)
from movie_catalog.utils.rate_limit import RateLimitedPool

logger = logging.getLogger(__name__)

FLATRATE_OFFER_TYPE = "flatrate"


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_positive_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None


def parse_details_payload(payload: Mapping[str, Any]) -> DetailRecord | None:
    tmdb_id = payload.get("id")
    if not isinstance(tmdb_id, int) or isinstance(tmdb_id, bool):
        return None

    genres: list[str] = []
    raw_genres = payload.get("genres")
    if isinstance(raw_genres, list):
        for genre in raw_genres:
            name = _as_str(genre.get("name")) if isinstance(genre, Mapping) else None
            if name:
                genres.append(name)

    return DetailRecord(
        tmdb_id=tmdb_id,
        title=_as_str(payload.get("title")) or f"TMDb {tmdb_id}",
        release_date=_as_str(payload.get("release_date")),
        poster_path=_as_str(payload.get("poster_path")),
        backdrop_path=_as_str(payload.get("backdrop_path")),
        overview=_as_str(payload.get("overview")),
        runtime=_as_positive_int(payload.get("runtime")),
        genres=tuple(genres),
        imdb_id=_as_str(payload.get("imdb_id")),
    )


def parse_offers_payload(
    payload: Mapping[str, Any],
    *,
    country: str,
    allowed_provider_ids: Iterable[int],
) -> list[OfferRecord]:
    """
    Subscription (flatrate) offers for `country` restricted to `allowed_provider_ids`.

    Every offer carries the region's shared TMDb watch link; a missing region or an
    absent flatrate list yields no offers.
    """

    results = payload.get("results")
    if not isinstance(results, Mapping):
        return []
    region_block = results.get(country)
    if not isinstance(region_block, Mapping):
        return []
    flatrate = region_block.get(FLATRATE_OFFER_TYPE)
    if not isinstance(flatrate, list):
        return []

    allowed = {int(p) for p in allowed_provider_ids}
    link = _as_str(region_block.get("link")) or ""

    offers: list[OfferRecord] = []
    seen: set[int] = set()
    for provider in flatrate:
        if not isinstance(provider, Mapping):
            continue
        provider_id = provider.get("provider_id")
        if not isinstance(provider_id, int) or provider_id not in allowed or provider_id in seen:
            continue
        seen.add(provider_id)
        # Built-in display names win over TMDb's regional spellings.
        name = STREAMING_PROVIDERS.get(provider_id) or _as_str(provider.get("provider_name"))
        name = name or provider_label(provider_id)
        offers.append(OfferRecord(provider_id=provider_id, provider_name=name, url=link))
    return offers


def parse_rating_payload(payload: Mapping[str, Any]) -> RatingRecord:
    if not is_found(dict(payload)):
        return RatingRecord.empty()

    rotten_tomatoes: int | None = None
    metacritic: int | None = None
    ratings = payload.get("Ratings")
    if isinstance(ratings, list):
        for rating in ratings:
            if not isinstance(rating, Mapping):
                continue
            source = rating.get("Source")
            if source == ROTTEN_TOMATOES_SOURCE:
                rotten_tomatoes = parse_percent(rating.get("Value"))
            elif source == METACRITIC_SOURCE:
                metacritic = parse_out_of_100(rating.get("Value"))

    return RatingRecord(
        imdb_rating=parse_float_or_none(payload.get("imdbRating")),
        imdb_votes=parse_int_or_none(payload.get("imdbVotes")),
        rotten_tomatoes_score=rotten_tomatoes,
        metacritic_score=metacritic,
    )


def fetch_details(
    tmdb_id: int,
    *,
    api_key: str,
    pool: RateLimitedPool,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
) -> DetailRecord | None:
    """TMDb details for one movie, or `None` when TMDb cannot supply them."""

    try:
        payload = pool.run(
            fetch_movie_details,
            tmdb_id,
            api_key=api_key,
            session=session,
            timeout_seconds=timeout_seconds,
            max_attempts=max_attempts,
        )
    except TmdbClientError as exc:
        logger.warning("Failed to fetch details for movie %s (status=%s): %s", tmdb_id, exc.status_code, exc)
        return None
    return parse_details_payload(payload)


def fetch_offers(
    tmdb_id: int,
    *,
    country: str,
    allowed_provider_ids: Iterable[int],
    api_key: str,
    pool: RateLimitedPool,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
) -> list[OfferRecord]:
    try:
        payload = pool.run(
            fetch_movie_watch_providers,
            tmdb_id,
            api_key=api_key,
            session=session,
            timeout_seconds=timeout_seconds,
            max_attempts=max_attempts,
        )
    except TmdbClientError as exc:
        logger.warning("Failed to fetch watch providers for movie %s (status=%s): %s", tmdb_id, exc.status_code, exc)
        return []
    return parse_offers_payload(payload, country=country, allowed_provider_ids=allowed_provider_ids)


def fetch_rating_data(
    imdb_id: str,
    *,
    api_key: str,
    pool: RateLimitedPool,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
) -> RatingRecord:
    """OMDb ratings for `imdb_id`; all-null when OMDb fails or does not know the title."""

    try:
        payload = pool.run(
            fetch_title_by_imdb_id,
            imdb_id,
            api_key=api_key,
            session=session,
            timeout_seconds=timeout_seconds,
            max_attempts=max_attempts,
        )
    except OmdbClientError as exc:
        logger.warning("Failed to fetch OMDb ratings for %s (status=%s): %s", imdb_id, exc.status_code, exc)
        return RatingRecord.empty()
    return parse_rating_payload(payload)

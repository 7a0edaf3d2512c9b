from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable

import requests

from movie_catalog.integrations.http import DEFAULT_TIMEOUT_SECONDS
from movie_catalog.integrations.tmdb.client import (
    MAX_DISCOVER_PAGES,
    MIN_VOTE_COUNT,
    TmdbClientError,
    fetch_discover_movies_page,
)
from movie_catalog.utils.rate_limit import RateLimitedPool

logger = logging.getLogger(__name__)

DISCOVER_PAGE_DELAY_SECONDS = 0.05


def discover_streaming_movies(
    *,
    region: str,
    provider_ids: Iterable[int],
    api_key: str,
    session: requests.Session | None = None,
    pool: RateLimitedPool | None = None,
    max_pages: int = MAX_DISCOVER_PAGES,
    min_vote_count: int = MIN_VOTE_COUNT,
    page_delay_seconds: float = DISCOVER_PAGE_DELAY_SECONDS,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
    sleep: Callable[[float], None] = time.sleep,
) -> list[dict[str, Any]]:
    """
    Page through TMDb discover for `region` and return the raw result dicts.

    Pages are fetched in order until `total_pages` or `max_pages` (capped at 25, TMDb's
    result ceiling) is reached. A failed page ends pagination early; pages already
    fetched are kept.
    """

    provider_ids = [int(p) for p in provider_ids]
    max_pages = max(1, min(int(max_pages), MAX_DISCOVER_PAGES))
    session = session or requests.Session()

    movies: list[dict[str, Any]] = []
    page = 1
    total_pages = 1
    while page <= total_pages and page <= max_pages:
        call_kwargs: dict[str, Any] = {
            "region": region,
            "provider_ids": provider_ids,
            "page": page,
            "api_key": api_key,
            "session": session,
            "min_vote_count": min_vote_count,
            "timeout_seconds": timeout_seconds,
            "max_attempts": max_attempts,
        }
        try:
            if pool is not None:
                payload = pool.run(fetch_discover_movies_page, **call_kwargs)
            else:
                payload = fetch_discover_movies_page(**call_kwargs)
        except TmdbClientError as exc:
            logger.warning("Discover page %s for %s failed (status=%s): %s", page, region, exc.status_code, exc)
            print(f"  Failed to fetch page {page}: {exc}")
            break

        results = payload.get("results")
        page_results = [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []
        movies.extend(page_results)

        reported_total = payload.get("total_pages")
        if isinstance(reported_total, int) and reported_total > 0:
            total_pages = min(reported_total, max_pages)
        else:
            total_pages = min(1, max_pages)

        print(f"  Page {page}/{total_pages} - Found {len(page_results)} movies")
        page += 1

        if page_delay_seconds > 0:
            sleep(page_delay_seconds)

    print(f"Total: {len(movies)} movies found for {region}")
    return movies

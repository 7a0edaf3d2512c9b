from __future__ import annotations

from typing import Any, Iterable

import requests

from movie_catalog.integrations.http import DEFAULT_TIMEOUT_SECONDS, UpstreamClientError, request_json

TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"

POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"

# TMDb stops serving discover results after 500 items (20 per page x 25 pages).
MAX_DISCOVER_PAGES = 25
MIN_VOTE_COUNT = 100


class TmdbClientError(UpstreamClientError):
    pass


def build_image_url(path: str | None, *, size: str) -> str | None:
    if not isinstance(path, str) or not path.strip():
        return None
    return f"{TMDB_IMAGE_BASE_URL}/{size}{path.strip()}"


def _require_api_key(api_key: str | None) -> str:
    resolved = (api_key or "").strip()
    if not resolved:
        raise TmdbClientError("TMDb api key is empty.")
    return resolved


def _get(
    path: str,
    *,
    api_key: str | None,
    session: requests.Session | None,
    params: dict[str, Any] | None = None,
    timeout_seconds: float,
    max_attempts: int,
) -> dict[str, Any]:
    query: dict[str, Any] = {"api_key": _require_api_key(api_key)}
    query.update(params or {})
    return request_json(
        session or requests.Session(),
        f"{TMDB_API_BASE_URL}{path}",
        params=query,
        service="TMDb",
        error_cls=TmdbClientError,
        timeout_seconds=timeout_seconds,
        max_attempts=max_attempts,
    )


def fetch_discover_movies_page(
    *,
    region: str,
    provider_ids: Iterable[int],
    page: int,
    api_key: str | None,
    session: requests.Session | None = None,
    min_vote_count: int = MIN_VOTE_COUNT,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
) -> dict[str, Any]:
    """
    Fetch one page of `/discover/movie` for movies streamable in `region` on any of `provider_ids`.

    Results are sorted by descending vote average and limited to titles with at least
    `min_vote_count` votes. Returns the raw payload (`results`, `total_pages`, ...).
    """

    return _get(
        "/discover/movie",
        api_key=api_key,
        session=session,
        params={
            "watch_region": region,
            "with_watch_providers": "|".join(str(int(p)) for p in provider_ids),
            "sort_by": "vote_average.desc",
            "vote_count.gte": str(int(min_vote_count)),
            "page": int(page),
        },
        timeout_seconds=timeout_seconds,
        max_attempts=max_attempts,
    )


def fetch_movie_details(
    movie_id: int,
    *,
    api_key: str | None,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
) -> dict[str, Any]:
    return _get(
        f"/movie/{int(movie_id)}",
        api_key=api_key,
        session=session,
        timeout_seconds=timeout_seconds,
        max_attempts=max_attempts,
    )


def fetch_movie_watch_providers(
    movie_id: int,
    *,
    api_key: str | None,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
) -> dict[str, Any]:
    """Per-region offer map: `{"results": {"SE": {"flatrate": [...], "link": "..."}}}`."""

    return _get(
        f"/movie/{int(movie_id)}/watch/providers",
        api_key=api_key,
        session=session,
        timeout_seconds=timeout_seconds,
        max_attempts=max_attempts,
    )

from __future__ import annotations

from typing import Any

import requests

from movie_catalog.integrations.http import DEFAULT_TIMEOUT_SECONDS, UpstreamClientError, request_json

OMDB_API_BASE_URL = "https://www.omdbapi.com/"

# Free-tier keys are capped at roughly 10 requests per second.
OMDB_MAX_REQUESTS_PER_SECOND = 10

ROTTEN_TOMATOES_SOURCE = "Rotten Tomatoes"
METACRITIC_SOURCE = "Metacritic"


class OmdbClientError(UpstreamClientError):
    pass


def fetch_title_by_imdb_id(
    imdb_id: str,
    *,
    api_key: str | None,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
) -> dict[str, Any]:
    """
    Fetch the OMDb record for an IMDb id (`tt...`).

    OMDb answers unknown ids with HTTP 200 and `{"Response": "False", "Error": ...}`;
    callers must check `Response` themselves.
    """

    resolved_key = (api_key or "").strip()
    if not resolved_key:
        raise OmdbClientError("OMDb api key is empty.")
    imdb_id = (imdb_id or "").strip()
    if not imdb_id:
        raise OmdbClientError("OMDb lookup requires an IMDb id.")

    return request_json(
        session or requests.Session(),
        OMDB_API_BASE_URL,
        params={"apikey": resolved_key, "i": imdb_id},
        service="OMDb",
        error_cls=OmdbClientError,
        timeout_seconds=timeout_seconds,
        max_attempts=max_attempts,
    )


def is_found(payload: dict[str, Any]) -> bool:
    return str(payload.get("Response") or "").strip().casefold() == "true"

from __future__ import annotations

import logging
import random
import time
from typing import Any, Mapping

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0


class UpstreamClientError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


def _backoff_delay(attempt: int, *, retry_after: str | None = None) -> float:
    delay = 1.0 * (2**attempt)
    retry_after = (retry_after or "").strip()
    if retry_after.isdigit():
        delay = max(delay, float(retry_after))
    return delay + random.uniform(0.0, delay * 0.25)


def request_json(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    service: str,
    error_cls: type[UpstreamClientError] = UpstreamClientError,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_attempts: int = 1,
    sleep=time.sleep,
) -> dict[str, Any]:
    """
    GET `url` and return the decoded JSON object.

    Any non-200 status, transport failure or non-object body raises `error_cls`.
    With `max_attempts > 1`, 429/5xx responses and transport failures are retried with
    exponential backoff plus jitter (honoring `Retry-After`); other statuses fail at once.
    """

    headers = {"accept": "application/json"}
    max_attempts = max(1, int(max_attempts))

    last_response: requests.Response | None = None
    for attempt in range(max_attempts):
        try:
            resp = session.get(url, params=params, headers=headers, timeout=timeout_seconds)
        except requests.RequestException as exc:
            if attempt < max_attempts - 1:
                delay = _backoff_delay(attempt)
                logger.debug("%s request failed (%s); retrying in %.2fs", service, exc, delay)
                sleep(delay)
                continue
            raise error_cls(f"{service} request failed: {exc}") from exc

        last_response = resp
        if resp.status_code == 200:
            break

        retryable = resp.status_code == 429 or 500 <= resp.status_code < 600
        if retryable and attempt < max_attempts - 1:
            delay = _backoff_delay(attempt, retry_after=(resp.headers or {}).get("Retry-After"))
            logger.debug("%s returned HTTP %s; retrying in %.2fs", service, resp.status_code, delay)
            sleep(delay)
            continue

        raise error_cls(
            f"{service} request failed with HTTP {resp.status_code}.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        )

    if last_response is None:
        raise error_cls(f"{service} request failed (no response).")
    resp = last_response

    try:
        payload = resp.json()
    except ValueError as exc:
        raise error_cls(
            f"{service} returned non-JSON response.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        ) from exc

    if not isinstance(payload, dict):
        raise error_cls(f"{service} returned unexpected JSON shape (not an object).", status_code=resp.status_code)
    return payload


def build_session(*, pool_maxsize: int = 10) -> requests.Session:
    """Session whose connection pool can serve `pool_maxsize` concurrent requests per host."""

    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=4, pool_maxsize=max(1, int(pool_maxsize)))
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session

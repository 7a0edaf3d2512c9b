"""
Sync configuration.

Settings are read once from the environment (after `.env` loading) into a
`SyncSettings` value that is passed explicitly to the pipeline; nothing under
`movie_catalog.ingestion` reads the environment itself.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from movie_catalog.integrations.http import DEFAULT_TIMEOUT_SECONDS
from movie_catalog.integrations.omdb.client import OMDB_MAX_REQUESTS_PER_SECOND

logger = logging.getLogger(__name__)

DEFAULT_TMDB_MAX_CONCURRENT = 50
DEFAULT_OMDB_MAX_CONCURRENT = 10
DEFAULT_OMDB_MIN_INTERVAL_SECONDS = 1.0 / OMDB_MAX_REQUESTS_PER_SECOND


class ConfigError(RuntimeError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__("Missing required environment variables: " + ", ".join(missing))
        self.missing = list(missing)


@dataclass(frozen=True)
class SyncSettings:
    tmdb_api_key: str
    omdb_api_key: str
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    tmdb_max_concurrent: int = DEFAULT_TMDB_MAX_CONCURRENT
    omdb_max_concurrent: int = DEFAULT_OMDB_MAX_CONCURRENT
    omdb_min_interval_seconds: float = DEFAULT_OMDB_MIN_INTERVAL_SECONDS
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_attempts: int = 1


def load_env(*, override: bool = False) -> Path | None:
    repo_root = Path(__file__).resolve().parents[1]
    for path in (repo_root / ".env", Path.cwd() / ".env"):
        if path.is_file():
            load_dotenv(dotenv_path=path, override=override)
            return path
    return None


def _env_str(environ: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


def _env_int(environ: Mapping[str, str], name: str, default: int, *, minimum: int = 1) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    if not raw.isdigit() or int(raw) < minimum:
        logger.warning("Ignoring %s=%r (expected an integer >= %d); using %d.", name, raw, minimum, default)
        return default
    return int(raw)


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = -1.0
    if not value > 0:
        logger.warning("Ignoring %s=%r (expected a positive number); using %s.", name, raw, default)
        return default
    return value


def load_sync_settings(environ: Mapping[str, str] | None = None, *, require_supabase: bool = True) -> SyncSettings:
    """
    Build `SyncSettings` from `environ` (defaults to `os.environ`).

    Raises `ConfigError` listing every missing required variable, so callers can
    report them all before any network call is made.
    """

    environ = os.environ if environ is None else environ

    supabase_url = _env_str(environ, "SUPABASE_URL")
    supabase_service_key = _env_str(environ, "SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY")
    tmdb_api_key = _env_str(environ, "TMDB_API_KEY")
    omdb_api_key = _env_str(environ, "OMDB_API_KEY")

    missing: list[str] = []
    if require_supabase and not supabase_url:
        missing.append("SUPABASE_URL")
    if require_supabase and not supabase_service_key:
        missing.append("SUPABASE_SERVICE_KEY")
    if not tmdb_api_key:
        missing.append("TMDB_API_KEY")
    if not omdb_api_key:
        missing.append("OMDB_API_KEY")
    if missing:
        raise ConfigError(missing)

    omdb_interval_ms = _env_int(
        environ,
        "OMDB_MIN_INTERVAL_MS",
        int(round(DEFAULT_OMDB_MIN_INTERVAL_SECONDS * 1000)),
        minimum=0,
    )

    return SyncSettings(
        tmdb_api_key=tmdb_api_key or "",
        omdb_api_key=omdb_api_key or "",
        supabase_url=supabase_url,
        supabase_service_key=supabase_service_key,
        tmdb_max_concurrent=_env_int(environ, "TMDB_MAX_CONCURRENT", DEFAULT_TMDB_MAX_CONCURRENT),
        omdb_max_concurrent=_env_int(environ, "OMDB_MAX_CONCURRENT", DEFAULT_OMDB_MAX_CONCURRENT),
        omdb_min_interval_seconds=omdb_interval_ms / 1000.0,
        request_timeout_seconds=_env_float(environ, "HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        max_attempts=_env_int(environ, "HTTP_MAX_ATTEMPTS", 1),
    )

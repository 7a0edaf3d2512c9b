from __future__ import annotations

import pytest

from movie_catalog.config import ConfigError, SyncSettings, load_sync_settings

FULL_ENV = {
    "SUPABASE_URL": "https://example.supabase.co",
    "SUPABASE_SERVICE_KEY": "service-key",
    "TMDB_API_KEY": "tmdb-key",
    "OMDB_API_KEY": "omdb-key",
}


def test_load_sync_settings_defaults() -> None:
    settings = load_sync_settings(FULL_ENV)

    assert settings == SyncSettings(
        tmdb_api_key="tmdb-key",
        omdb_api_key="omdb-key",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )
    assert settings.tmdb_max_concurrent == 50
    assert settings.omdb_max_concurrent == 10
    assert settings.omdb_min_interval_seconds == pytest.approx(0.1)
    assert settings.max_attempts == 1


def test_load_sync_settings_lists_every_missing_variable() -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_sync_settings({"TMDB_API_KEY": "  "})

    assert excinfo.value.missing == ["SUPABASE_URL", "SUPABASE_SERVICE_KEY", "TMDB_API_KEY", "OMDB_API_KEY"]


def test_load_sync_settings_without_supabase_for_dry_runs() -> None:
    settings = load_sync_settings({"TMDB_API_KEY": "t", "OMDB_API_KEY": "o"}, require_supabase=False)

    assert settings.supabase_url is None
    assert settings.tmdb_api_key == "t"


def test_load_sync_settings_accepts_service_role_key_alias() -> None:
    env = dict(FULL_ENV)
    env.pop("SUPABASE_SERVICE_KEY")
    env["SUPABASE_SERVICE_ROLE_KEY"] = "role-key"

    assert load_sync_settings(env).supabase_service_key == "role-key"


def test_load_sync_settings_overrides_and_bad_values() -> None:
    env = dict(FULL_ENV)
    env.update(
        {
            "TMDB_MAX_CONCURRENT": "20",
            "OMDB_MAX_CONCURRENT": "zero",
            "OMDB_MIN_INTERVAL_MS": "250",
            "HTTP_TIMEOUT_SECONDS": "-3",
            "HTTP_MAX_ATTEMPTS": "4",
        }
    )

    settings = load_sync_settings(env)

    assert settings.tmdb_max_concurrent == 20
    assert settings.omdb_max_concurrent == 10
    assert settings.omdb_min_interval_seconds == pytest.approx(0.25)
    assert settings.request_timeout_seconds == 20.0
    assert settings.max_attempts == 4

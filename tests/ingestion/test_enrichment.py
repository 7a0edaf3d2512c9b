from __future__ import annotations

import json
from pathlib import Path

import pytest

from movie_catalog.ingestion import enrichment as mod
from movie_catalog.integrations.omdb.client import OmdbClientError
from movie_catalog.integrations.tmdb.client import TmdbClientError
from movie_catalog.models.movies import OfferRecord, RatingRecord
from movie_catalog.utils.rate_limit import RateLimitedPool

REPO_ROOT = Path(__file__).resolve().parents[2]


def _fixture(*parts: str) -> dict:
    return json.loads((REPO_ROOT / "tests" / "fixtures" / Path(*parts)).read_text(encoding="utf-8"))


def _raise(exc: Exception):
    def _fn(*_args, **_kwargs):  # noqa: ANN002, ANN003
        raise exc

    return _fn


@pytest.fixture
def pool() -> RateLimitedPool:
    return RateLimitedPool("test", max_concurrent=2)


def test_fetch_details_parses_fixture(monkeypatch: pytest.MonkeyPatch, pool: RateLimitedPool) -> None:
    monkeypatch.setattr(mod, "fetch_movie_details", lambda *args, **kwargs: _fixture("tmdb", "movie_details_sample.json"))

    details = mod.fetch_details(278, api_key="k", pool=pool)

    assert details is not None
    assert details.tmdb_id == 278
    assert details.title == "The Shawshank Redemption"
    assert details.release_year == 1994
    assert details.runtime == 142
    assert details.genres == ("Drama", "Crime")
    assert details.imdb_id == "tt0111161"
    assert details.poster_path == "/poster-shawshank.jpg"


def test_fetch_details_returns_none_on_http_error(monkeypatch: pytest.MonkeyPatch, pool: RateLimitedPool) -> None:
    monkeypatch.setattr(
        mod,
        "fetch_movie_details",
        _raise(TmdbClientError("TMDb request failed with HTTP 404.", status_code=404)),
    )

    assert mod.fetch_details(278, api_key="k", pool=pool) is None


def test_parse_details_payload_treats_missing_fields_as_absent() -> None:
    details = mod.parse_details_payload({"id": 5, "title": "Bare", "runtime": 0, "imdb_id": "", "genres": None})

    assert details is not None
    assert details.runtime is None
    assert details.imdb_id is None
    assert details.genres == ()
    assert details.release_year is None
    assert mod.parse_details_payload({"title": "no id"}) is None


def test_fetch_offers_filters_flatrate_to_allow_list(monkeypatch: pytest.MonkeyPatch, pool: RateLimitedPool) -> None:
    payload = _fixture("tmdb", "movie_watch_providers_sample.json")
    monkeypatch.setattr(mod, "fetch_movie_watch_providers", lambda *args, **kwargs: payload)

    offers = mod.fetch_offers(278, country="SE", allowed_provider_ids=[8, 9], api_key="k", pool=pool)

    assert offers == [
        OfferRecord(
            provider_id=8,
            provider_name="Netflix",
            url="https://www.themoviedb.org/movie/278-the-shawshank-redemption/watch?locale=SE",
        )
    ]


def test_parse_offers_payload_without_flatrate_or_region_is_empty() -> None:
    payload = _fixture("tmdb", "movie_watch_providers_sample.json")

    assert mod.parse_offers_payload(payload, country="US", allowed_provider_ids=[2, 8]) == []
    assert mod.parse_offers_payload(payload, country="GB", allowed_provider_ids=[8]) == []
    assert mod.parse_offers_payload({}, country="SE", allowed_provider_ids=[8]) == []


def test_parse_offers_payload_uses_upstream_name_for_unknown_providers() -> None:
    payload = {"results": {"SE": {"flatrate": [{"provider_id": 76, "provider_name": "Viaplay"}]}}}

    offers = mod.parse_offers_payload(payload, country="SE", allowed_provider_ids=[76])

    assert offers == [OfferRecord(provider_id=76, provider_name="Viaplay", url="")]


def test_fetch_offers_returns_empty_on_http_error(monkeypatch: pytest.MonkeyPatch, pool: RateLimitedPool) -> None:
    monkeypatch.setattr(mod, "fetch_movie_watch_providers", _raise(TmdbClientError("boom", status_code=500)))

    assert mod.fetch_offers(278, country="SE", allowed_provider_ids=[8], api_key="k", pool=pool) == []


def test_fetch_rating_data_extracts_all_scores(monkeypatch: pytest.MonkeyPatch, pool: RateLimitedPool) -> None:
    monkeypatch.setattr(mod, "fetch_title_by_imdb_id", lambda *args, **kwargs: _fixture("omdb", "title_sample.json"))

    ratings = mod.fetch_rating_data("tt0111161", api_key="k", pool=pool)

    assert ratings == RatingRecord(
        imdb_rating=9.3,
        imdb_votes=2950123,
        rotten_tomatoes_score=89,
        metacritic_score=82,
    )


def test_fetch_rating_data_not_found_is_all_null(monkeypatch: pytest.MonkeyPatch, pool: RateLimitedPool) -> None:
    monkeypatch.setattr(mod, "fetch_title_by_imdb_id", lambda *args, **kwargs: _fixture("omdb", "title_not_found.json"))

    ratings = mod.fetch_rating_data("tt0000000", api_key="k", pool=pool)

    assert ratings.is_empty


def test_fetch_rating_data_http_error_is_all_null(monkeypatch: pytest.MonkeyPatch, pool: RateLimitedPool) -> None:
    monkeypatch.setattr(mod, "fetch_title_by_imdb_id", _raise(OmdbClientError("HTTP 401", status_code=401)))

    assert mod.fetch_rating_data("tt0111161", api_key="k", pool=pool) == RatingRecord.empty()


def test_parse_rating_payload_degrades_malformed_values_to_none() -> None:
    ratings = mod.parse_rating_payload(
        {
            "Response": "True",
            "imdbRating": "N/A",
            "imdbVotes": "N/A",
            "Ratings": [
                {"Source": "Rotten Tomatoes", "Value": "Certified Fresh"},
                {"Source": "Metacritic", "Value": "N/A"},
            ],
        }
    )

    assert ratings == RatingRecord.empty()


def test_parse_rating_payload_missing_sources_stay_null() -> None:
    ratings = mod.parse_rating_payload(
        {
            "Response": "True",
            "imdbRating": "6.4",
            "imdbVotes": "1,024",
            "Ratings": [{"Source": "Internet Movie Database", "Value": "6.4/10"}],
        }
    )

    assert ratings.imdb_rating == 6.4
    assert ratings.imdb_votes == 1024
    assert ratings.rotten_tomatoes_score is None
    assert ratings.metacritic_score is None

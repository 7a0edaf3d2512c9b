from __future__ import annotations

from collections.abc import Iterable

# TMDb watch-provider ids for the subscription services the catalog tracks.
STREAMING_PROVIDERS: dict[int, str] = {
    8: "Netflix",
    9: "Amazon Prime Video",
    337: "Disney+",
    384: "HBO Max",
    350: "Apple TV+",
    531: "Paramount+",
}

DEFAULT_PROVIDER_IDS: tuple[int, ...] = tuple(STREAMING_PROVIDERS)

# `movies.on_netflix` / `movies.netflix_url` predate `streaming_providers` and are still read by older clients.
LEGACY_PROVIDER_ID = 8

SUPPORTED_COUNTRIES: dict[str, str] = {
    "SE": "Sweden",
    "US": "United States",
    "GB": "United Kingdom",
    "DE": "Germany",
    "CA": "Canada",
    "FR": "France",
    "IT": "Italy",
    "ES": "Spain",
    "NL": "Netherlands",
    "ZA": "South Africa",
}

DEFAULT_COUNTRY = "SE"


def provider_label(provider_id: int) -> str:
    return STREAMING_PROVIDERS.get(provider_id) or f"Provider {provider_id}"


def describe_providers(provider_ids: Iterable[int]) -> str:
    return ", ".join(provider_label(p) for p in provider_ids)

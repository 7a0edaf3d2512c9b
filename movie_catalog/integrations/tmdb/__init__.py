"""
TMDb integration clients.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from movie_catalog.integrations.tmdb.client import (
        TmdbClientError,
        fetch_discover_movies_page,
        fetch_movie_details,
        fetch_movie_watch_providers,
    )

__all__ = [
    "TmdbClientError",
    "fetch_discover_movies_page",
    "fetch_movie_details",
    "fetch_movie_watch_providers",
]


def __getattr__(name: str):
    if name in __all__:
        from movie_catalog.integrations.tmdb import client

        return getattr(client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

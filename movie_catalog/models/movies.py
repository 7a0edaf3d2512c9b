from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from movie_catalog.utils.parsing import parse_release_year


@dataclass(frozen=True)
class CandidateRef:
    """A movie reference returned by TMDb discover; lives for one sync run."""

    tmdb_id: int
    title: str
    overview: str | None = None
    genre_ids: tuple[int, ...] = ()

    @classmethod
    def from_discover_result(cls, result: Mapping[str, Any]) -> CandidateRef | None:
        tmdb_id = result.get("id")
        if not isinstance(tmdb_id, int) or isinstance(tmdb_id, bool):
            return None
        title = result.get("title")
        genre_ids = result.get("genre_ids")
        overview = result.get("overview")
        return cls(
            tmdb_id=tmdb_id,
            title=title.strip() if isinstance(title, str) and title.strip() else f"TMDb {tmdb_id}",
            overview=overview if isinstance(overview, str) and overview else None,
            genre_ids=tuple(g for g in genre_ids if isinstance(g, int)) if isinstance(genre_ids, list) else (),
        )


@dataclass(frozen=True)
class DetailRecord:
    """
    Full TMDb movie metadata (`/movie/{id}`).

    `imdb_id` is the join key into OMDb; optional fields are `None` when TMDb omits them.
    """

    tmdb_id: int
    title: str
    release_date: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    overview: str | None = None
    runtime: int | None = None
    genres: tuple[str, ...] = ()
    imdb_id: str | None = None

    @property
    def release_year(self) -> int | None:
        return parse_release_year(self.release_date)


@dataclass(frozen=True)
class OfferRecord:
    provider_id: int
    provider_name: str
    url: str = ""

    def to_json(self) -> dict[str, Any]:
        return {"provider_id": self.provider_id, "name": self.provider_name, "url": self.url}


@dataclass(frozen=True)
class RatingRecord:
    imdb_rating: float | None = None
    imdb_votes: int | None = None
    rotten_tomatoes_score: int | None = None
    metacritic_score: int | None = None

    @classmethod
    def empty(cls) -> RatingRecord:
        return cls()

    @property
    def is_empty(self) -> bool:
        return (
            self.imdb_rating is None
            and self.imdb_votes is None
            and self.rotten_tomatoes_score is None
            and self.metacritic_score is None
        )


@dataclass(frozen=True)
class MovieUpsert:
    """
    Merged movie row (maps to `movies`, unique on `(tmdb_id, country)`).

    `on_netflix` / `netflix_url` are derived from `streaming_providers` and kept for older readers.
    """

    tmdb_id: int
    title: str
    country: str
    imdb_id: str | None = None
    year: int | None = None
    poster_url: str | None = None
    backdrop_url: str | None = None
    overview: str | None = None
    runtime: int | None = None
    genres: list[str] | None = None
    imdb_rating: float | None = None
    imdb_votes: int | None = None
    rotten_tomatoes_score: int | None = None
    metacritic_score: int | None = None
    on_netflix: bool = False
    netflix_url: str | None = None
    streaming_providers: list[OfferRecord] = field(default_factory=list)

    def to_row(self, *, last_updated: str) -> dict[str, Any]:
        return {
            "tmdb_id": self.tmdb_id,
            "imdb_id": self.imdb_id,
            "title": self.title,
            "year": self.year,
            "poster_url": self.poster_url,
            "backdrop_url": self.backdrop_url,
            "overview": self.overview,
            "runtime": self.runtime,
            "genres": list(self.genres) if self.genres is not None else None,
            "imdb_rating": self.imdb_rating,
            "imdb_votes": self.imdb_votes,
            "rotten_tomatoes_score": self.rotten_tomatoes_score,
            "metacritic_score": self.metacritic_score,
            "country": self.country,
            "on_netflix": self.on_netflix,
            "netflix_url": self.netflix_url,
            "streaming_providers": [offer.to_json() for offer in self.streaming_providers],
            "last_updated": last_updated,
        }

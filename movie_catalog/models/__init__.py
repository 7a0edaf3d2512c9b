"""
Data models for the movie catalog sync.
"""

from movie_catalog.models.movies import (
    CandidateRef,
    DetailRecord,
    MovieUpsert,
    OfferRecord,
    RatingRecord,
)

__all__ = [
    "CandidateRef",
    "DetailRecord",
    "MovieUpsert",
    "OfferRecord",
    "RatingRecord",
]

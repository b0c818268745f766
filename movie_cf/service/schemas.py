"""Pydantic schemas for the recommendation API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class MovieItem(BaseModel):
    """A catalog movie offered to a new user for rating."""

    movieId: int
    title: str
    genres: str


class RandomMoviesResponse(BaseModel):
    numMovies: int
    results: list[MovieItem]


class UserRating(BaseModel):
    """One rating submitted by a new user."""

    movieId: int = Field(..., ge=1, description="movieId from movies.csv")
    rating: float = Field(..., ge=1.0, le=5.0, description="Star rating (1..5)")


class NeighborItem(BaseModel):
    userId: int
    similarity: float
    num_ratings: int


class PredictedRatingItem(BaseModel):
    movieId: int
    title: str
    genres: str
    predictedRating: float


class RecommendResponse(BaseModel):
    """Recommendations for a newly registered user."""

    userId: int
    k: int
    neighbors: list[NeighborItem]
    results: list[PredictedRatingItem]


class SimilarUsersResponse(BaseModel):
    userId: int
    top_n: int
    results: list[NeighborItem]

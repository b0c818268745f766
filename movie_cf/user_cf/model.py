from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Tuple


@dataclass(frozen=True)
class ItemRating:
    itemId: int
    rating: float


@dataclass(frozen=True)
class ItemMeta:
    title: str
    genres: str

    @property
    def genre_set(self) -> set[str]:
        """Genres split on the MovieLens `|` delimiter."""
        return {g.strip() for g in str(self.genres).split("|") if g.strip()}


UserRatingVector = Tuple[ItemRating, ...]
RatingsTable = Dict[int, UserRatingVector]
Catalog = Dict[int, ItemMeta]


@dataclass(frozen=True)
class NeighborRecord:
    userId: int
    similarity: float
    ratings: UserRatingVector

    @cached_property
    def rating_by_item(self) -> dict[int, float]:
        return {int(r.itemId): float(r.rating) for r in self.ratings}


@dataclass(frozen=True)
class PredictedRating:
    itemId: int
    title: str
    genres: str
    predictedRating: float


@dataclass(frozen=True)
class Recommendation:
    """Result of registering a new user and scoring the catalog for them."""

    userId: int
    neighbors: list[NeighborRecord]
    items: list[PredictedRating]

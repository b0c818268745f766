from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..config import CFConfig, load_config
from ..data import load_corpus
from ..paths import ProjectPaths, get_repo_root
from ..store.ratings import RatingsStore
from .model import ItemRating, NeighborRecord, PredictedRating, Recommendation
from .neighbors import find_neighbors
from .predict import FALLBACK_RATING, predict_rating


logger = logging.getLogger(__name__)


class NoRatingsProvidedError(ValueError):
    """Raised when a new user is submitted without any ratings."""

    def __init__(self, message: str = "No ratings provided") -> None:
        super().__init__(message)


def _to_item_rating(entry: Any) -> ItemRating:
    if isinstance(entry, ItemRating):
        return ItemRating(itemId=int(entry.itemId), rating=float(entry.rating))
    if isinstance(entry, Mapping):
        item_id = entry["itemId"] if "itemId" in entry else entry["movieId"]
        return ItemRating(itemId=int(item_id), rating=float(entry["rating"]))
    item_id, rating = entry
    return ItemRating(itemId=int(item_id), rating=float(rating))


def normalize_ratings(entries: Iterable[Any]) -> tuple[ItemRating, ...]:
    """Coerce `ItemRating`s, `{itemId|movieId, rating}` mappings or `(id, rating)` pairs.

    Ids become ints; a repeated item keeps its last rating.
    """
    by_item: dict[int, float] = {}
    for entry in entries:
        r = _to_item_rating(entry)
        by_item[r.itemId] = r.rating
    return tuple(ItemRating(itemId=mid, rating=rating) for mid, rating in by_item.items())


def recommend(
    new_user_ratings: Iterable[Any],
    store: RatingsStore,
    *,
    k: int = 10,
    top_n: int = 10,
    mean_mode: str = "full_history",
    fallback: float = FALLBACK_RATING,
) -> Recommendation:
    """Register a new user and predict ratings for every catalog movie they have not rated.

    Steps:
    - assign the next user id and insert the user into `store`
    - pick the `k` most similar users (Pearson)
    - predict each unrated catalog movie as the similarity-weighted neighbor average
    - return the `top_n` highest predictions (ties keep catalog order)
    """
    vector = normalize_ratings(new_user_ratings)
    if not vector:
        raise NoRatingsProvidedError()
    if int(k) < 1:
        raise ValueError(f"k must be a positive integer, got {k}")

    user_id, table = store.register_user(vector)
    neighbors = find_neighbors(user_id, table, int(k), mean_mode=mean_mode)

    rated = {r.itemId for r in vector}
    predicted: list[PredictedRating] = []
    for movie_id, meta in store.catalog.items():
        if int(movie_id) in rated:
            continue
        predicted.append(
            PredictedRating(
                itemId=int(movie_id),
                title=meta.title,
                genres=meta.genres,
                predictedRating=predict_rating(int(movie_id), neighbors, fallback=fallback),
            )
        )

    predicted.sort(key=lambda p: p.predictedRating, reverse=True)
    logger.info(
        "Recommended for user %d: neighbors=%d unrated_movies=%d",
        user_id,
        len(neighbors),
        len(predicted),
    )
    return Recommendation(userId=user_id, neighbors=neighbors, items=predicted[: int(top_n)])


class UserUserCFRecommender:
    """Memory-based user-user CF recommender over an in-memory `RatingsStore`.

    Meant to be created once per process (service lifespan or CLI run) and reused.
    """

    def __init__(self, store: RatingsStore, *, config: CFConfig | None = None) -> None:
        self.store = store
        self.config = config if config is not None else CFConfig()

    @classmethod
    def from_config(cls, config_path: Path | None = None) -> "UserUserCFRecommender":
        """Load `config.yaml` and the CSV corpus it points to."""
        repo_root = get_repo_root()
        config_path = Path(config_path).resolve() if config_path else (repo_root / "config.yaml")
        cfg = load_config(config_path)

        paths = ProjectPaths.from_repo_root(repo_root, raw_dir=cfg.dataset.raw_dir)
        table, catalog = load_corpus(
            paths.raw_dir,
            ratings_file=cfg.dataset.ratings_file,
            movies_file=cfg.dataset.movies_file,
            ratings_sep=cfg.dataset.ratings_sep,
        )
        store = RatingsStore(table, catalog, max_session_users=cfg.max_session_users)
        logger.info(
            "UserCF ready: users=%d movies=%d k=%d mean_mode=%s",
            len(store),
            len(store.catalog),
            cfg.k,
            cfg.mean_mode,
        )
        return cls(store, config=cfg)

    def has_user(self, userId: int) -> bool:
        return int(userId) in self.store

    def similar_users(self, userId: int, *, top_n: Optional[int] = None) -> list[NeighborRecord]:
        """Neighborhood of an existing user (corpus or previously registered)."""
        n = int(top_n) if top_n is not None else int(self.config.k)
        return find_neighbors(int(userId), self.store.snapshot(), n, mean_mode=self.config.mean_mode)

    def recommend_for_new_user(self, ratings: Iterable[Any], *, k: Optional[int] = None) -> Recommendation:
        return recommend(
            ratings,
            self.store,
            k=int(k) if k is not None else int(self.config.k),
            top_n=int(self.config.top_n),
            mean_mode=self.config.mean_mode,
            fallback=float(self.config.fallback_rating),
        )

    def random_movies(self, n: Optional[int] = None, *, seed: Optional[int] = None) -> list[dict[str, Any]]:
        """Pick `n` catalog movies at random for a new user to rate."""
        count = int(n) if n is not None else int(self.config.num_candidate_movies)
        items = list(self.store.catalog.items())
        rng = random.Random(seed) if seed is not None else random
        rng.shuffle(items)
        return [
            {"movieId": int(mid), "title": meta.title, "genres": meta.genres}
            for mid, meta in items[: max(0, count)]
        ]

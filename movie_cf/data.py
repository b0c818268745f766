from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

import numpy as np
import pandas as pd

from .user_cf.model import Catalog, ItemMeta, ItemRating, RatingsTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawMovieLensData:
    movies: pd.DataFrame
    ratings: pd.DataFrame


REQUIRED_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "movies": ("movieId", "title", "genres"),
    "ratings": ("userId", "movieId", "rating"),
}


def load_raw_data(
    raw_dir: Path,
    *,
    ratings_file: str = "ratings.csv",
    movies_file: str = "movies.csv",
    ratings_sep: str = ",",
) -> RawMovieLensData:
    """Load the ratings and movies CSV files from a directory.

    Notes
    -----
    Columns are read as strings and coerced later by `clean_ratings` /
    `build_catalog`, so a malformed row is dropped instead of failing the load.
    """
    raw_dir = Path(raw_dir)
    ratings_path = raw_dir / ratings_file
    movies_path = raw_dir / movies_file
    missing = [p.name for p in (ratings_path, movies_path) if not p.exists()]
    if missing:
        raise FileNotFoundError(f"Missing raw dataset files in {raw_dir}: {missing}")

    ratings = pd.read_csv(ratings_path, sep=ratings_sep, dtype="string")
    movies = pd.read_csv(movies_path, sep=",", dtype="string")

    data = RawMovieLensData(movies=movies, ratings=ratings)
    validate_schema(data)
    return data


def validate_schema(data: RawMovieLensData) -> None:
    """Validate that all required columns exist."""
    for name, cols in REQUIRED_COLUMNS.items():
        df = getattr(data, name)
        missing = [c for c in cols if c not in df.columns]
        if missing:
            raise ValueError(f"{name} file missing columns: {missing}")


def clean_ratings(ratings: pd.DataFrame) -> pd.DataFrame:
    """Coerce rating rows to numeric and drop malformed ones.

    A row is kept only if userId, movieId and rating are all numeric and non-zero.
    Ids are truncated to integers.
    """
    cols = ["userId", "movieId", "rating"]
    df = pd.DataFrame(
        {c: pd.to_numeric(ratings[c], errors="coerce").astype("float64") for c in cols}
    )
    df = df[np.isfinite(df[cols]).all(axis=1)]
    df = df[(df[cols] != 0.0).all(axis=1)].copy()
    df["userId"] = np.trunc(df["userId"]).astype("int64")
    df["movieId"] = np.trunc(df["movieId"]).astype("int64")
    # "0.5" survives the non-zero check above but truncates to id 0.
    df = df[(df["userId"] != 0) & (df["movieId"] != 0)].reset_index(drop=True)

    dropped = len(ratings) - len(df)
    if dropped:
        logger.debug("Dropped %d malformed rating rows", dropped)
    return df


def build_ratings_table(ratings: pd.DataFrame) -> RatingsTable:
    """Group cleaned ratings into `userId -> (ItemRating, ...)`, in first-seen user order."""
    per_user: dict[int, dict[int, float]] = {}
    for uid, mid, rating in zip(
        ratings["userId"].tolist(),
        ratings["movieId"].tolist(),
        ratings["rating"].tolist(),
    ):
        # A repeated (user, movie) pair keeps the later rating.
        per_user.setdefault(int(uid), {})[int(mid)] = float(rating)

    return {
        uid: tuple(ItemRating(itemId=mid, rating=r) for mid, r in items.items())
        for uid, items in per_user.items()
    }


def build_catalog(movies: pd.DataFrame) -> Catalog:
    """Map `movieId -> ItemMeta`; rows with a non-numeric id are dropped."""
    movie_ids = pd.to_numeric(movies["movieId"], errors="coerce").astype("float64")
    titles = movies["title"].fillna("")
    genres = movies["genres"].fillna("")

    catalog: Catalog = {}
    for mid, title, genre in zip(movie_ids.tolist(), titles.tolist(), genres.tolist()):
        if not math.isfinite(mid):
            continue
        catalog[int(mid)] = ItemMeta(title=str(title), genres=str(genre))

    dropped = len(movies) - len(catalog)
    if dropped:
        logger.debug("Dropped %d malformed or duplicate movie rows", dropped)
    return catalog


def load_corpus(
    raw_dir: Path,
    *,
    ratings_file: str = "ratings.csv",
    movies_file: str = "movies.csv",
    ratings_sep: str = ",",
) -> tuple[RatingsTable, Catalog]:
    """Load CSVs and return the in-memory ratings table and catalog."""
    data = load_raw_data(
        raw_dir,
        ratings_file=ratings_file,
        movies_file=movies_file,
        ratings_sep=ratings_sep,
    )
    table = build_ratings_table(clean_ratings(data.ratings))
    catalog = build_catalog(data.movies)
    logger.info("Loaded corpus: users=%d movies=%d from %s", len(table), len(catalog), raw_dir)
    return table, catalog

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Callable

import pandas as pd

from ..utils import setup_logging
from .recommender import UserUserCFRecommender


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Rate a few movies, then get user-user CF recommendations")
    p.add_argument("--config", type=Path, default=None, help="Path to config.yaml (default: repo root)")
    p.add_argument("--k", type=int, default=None, help="Neighborhood size (default: config user_cf.k)")
    p.add_argument("--num-movies", type=int, default=None, help="How many movies to rate")
    p.add_argument("--seed", type=int, default=None, help="Seed for the random movie selection")
    p.add_argument("--log-level", type=str, default="WARNING", help="Logging level")
    return p


def parse_rating(raw: str) -> float | None:
    """Return the rating if `raw` is a number in [1, 5], else None."""
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    if value != value or value < 1.0 or value > 5.0:
        return None
    return value


def prompt_for_ratings(
    movies: list[dict[str, Any]],
    *,
    input_fn: Callable[[str], str] = input,
    print_fn: Callable[..., None] = print,
) -> list[dict[str, Any]]:
    """Ask for a 1-5 rating per movie, re-prompting until the answer is valid."""
    ratings: list[dict[str, Any]] = []
    for movie in movies:
        genres = ", ".join(str(movie["genres"]).split("|"))
        while True:
            rating = parse_rating(input_fn(f'Please rate the movie "{movie["title"]}" ({genres}) from 1 to 5 stars: '))
            if rating is not None:
                break
            print_fn("Please enter a rating between 1 and 5.")
        ratings.append({"movieId": int(movie["movieId"]), "rating": rating})
    return ratings


def main(argv: list[str] | None = None, *, input_fn: Callable[[str], str] = input) -> None:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level.upper())

    rec = UserUserCFRecommender.from_config(args.config)
    movies = rec.random_movies(args.num_movies, seed=args.seed)
    ratings = prompt_for_ratings(movies, input_fn=input_fn)
    result = rec.recommend_for_new_user(ratings, k=args.k)

    print(f"\n=== Top Recommendations for User {result.userId} ===")
    if result.items:
        df_r = pd.DataFrame([r.__dict__ for r in result.items])
        print(df_r.to_string(index=False))
    else:
        print("No recommendations found.")


if __name__ == "__main__":
    main()

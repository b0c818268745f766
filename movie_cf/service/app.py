"""FastAPI service entrypoint for the user-user CF recommender."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query

from ..paths import get_repo_root
from ..user_cf.model import NeighborRecord
from ..user_cf.recommender import NoRatingsProvidedError, UserUserCFRecommender
from ..utils import setup_logging
from .schemas import RandomMoviesResponse, RecommendResponse, SimilarUsersResponse, UserRating

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    repo_root = get_repo_root()
    config_path = _get_env_path("CONFIG_PATH", repo_root / "config.yaml")

    # A missing corpus is fatal: let the exception abort startup.
    logger.info("Loading ratings corpus with config=%s", config_path)
    app.state.user_cf = UserUserCFRecommender.from_config(config_path)
    yield


app = FastAPI(title="MovieLens User-User CF Service", lifespan=lifespan)


def _user_cf(app_: FastAPI) -> UserUserCFRecommender:
    rec = getattr(app_.state, "user_cf", None)
    if rec is None:
        raise HTTPException(status_code=503, detail="UserCF recommender not initialized")
    return rec


def _neighbor_item(n: NeighborRecord) -> dict:
    return {"userId": int(n.userId), "similarity": float(n.similarity), "num_ratings": len(n.ratings)}


@app.get("/movies/random", response_model=RandomMoviesResponse)
def movies_random(numMovies: int = Query(20, ge=1, le=200)) -> dict:
    """Random catalog movies for a new user to rate."""
    rec = _user_cf(app)
    movies = rec.random_movies(int(numMovies))
    return {"numMovies": int(numMovies), "results": movies}


@app.post("/recommendations", response_model=RecommendResponse)
def recommendations(ratings: list[UserRating], k: Optional[int] = Query(None, ge=1, le=200)) -> dict:
    """Register the submitted ratings as a new user and return the top predicted movies."""
    rec = _user_cf(app)
    try:
        result = rec.recommend_for_new_user([r.model_dump() for r in ratings], k=k)
    except NoRatingsProvidedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "userId": int(result.userId),
        "k": int(k if k is not None else rec.config.k),
        "neighbors": [_neighbor_item(n) for n in result.neighbors],
        "results": [
            {
                "movieId": int(p.itemId),
                "title": p.title,
                "genres": p.genres,
                "predictedRating": float(p.predictedRating),
            }
            for p in result.items
        ],
    }


@app.get("/users/{userId}/similar", response_model=SimilarUsersResponse)
def users_similar(userId: int, top_n: int = Query(10, ge=1, le=200)) -> dict:
    """Users with the most similar rating patterns (Pearson over co-rated movies)."""
    rec = _user_cf(app)
    try:
        sims = rec.similar_users(int(userId), top_n=int(top_n))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "userId": int(userId),
        "top_n": int(top_n),
        "results": [_neighbor_item(n) for n in sims],
    }

"""`config.yaml` loading for the collaborative-filtering recommender."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

MEAN_MODES = ("full_history", "common_items")


@dataclass(frozen=True)
class DatasetConfig:
    raw_dir: str = "data/raw"
    ratings_file: str = "ratings.csv"
    movies_file: str = "movies.csv"
    ratings_sep: str = ","


@dataclass(frozen=True)
class CFConfig:
    k: int = 10
    top_n: int = 10
    num_candidate_movies: int = 20
    mean_mode: str = "full_history"
    fallback_rating: float = 1.0
    # None keeps every registered user for the process lifetime.
    max_session_users: Optional[int] = None
    dataset: DatasetConfig = field(default_factory=DatasetConfig)

    def __post_init__(self) -> None:
        if self.mean_mode not in MEAN_MODES:
            raise ValueError(f"user_cf.mean_mode must be one of {MEAN_MODES}, got {self.mean_mode!r}")
        if int(self.k) < 1:
            raise ValueError(f"user_cf.k must be >= 1, got {self.k}")
        if int(self.top_n) < 1:
            raise ValueError(f"user_cf.top_n must be >= 1, got {self.top_n}")
        if self.max_session_users is not None and int(self.max_session_users) < 1:
            raise ValueError(f"user_cf.max_session_users must be >= 1 or null, got {self.max_session_users}")


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    obj = yaml.safe_load(path.read_text())
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ValueError(f"Expected YAML mapping at {path}, got {type(obj)}")
    return obj


def _section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    return cfg.get(name, {}) if isinstance(cfg.get(name), dict) else {}


def config_from_dict(cfg_yaml: dict[str, Any]) -> CFConfig:
    """Build a `CFConfig` from a parsed YAML mapping, using defaults for missing keys."""
    dataset_raw = _section(cfg_yaml, "dataset")
    user_cf_raw = _section(cfg_yaml, "user_cf")

    defaults = DatasetConfig()
    dataset = DatasetConfig(
        raw_dir=str(dataset_raw.get("raw_dir", defaults.raw_dir)),
        ratings_file=str(dataset_raw.get("ratings_file", defaults.ratings_file)),
        movies_file=str(dataset_raw.get("movies_file", defaults.movies_file)),
        ratings_sep=str(dataset_raw.get("ratings_sep", defaults.ratings_sep)),
    )

    max_session_users = user_cf_raw.get("max_session_users")
    return CFConfig(
        k=int(user_cf_raw.get("k", 10)),
        top_n=int(user_cf_raw.get("top_n", 10)),
        num_candidate_movies=int(user_cf_raw.get("num_candidate_movies", 20)),
        mean_mode=str(user_cf_raw.get("mean_mode", "full_history")),
        fallback_rating=float(user_cf_raw.get("fallback_rating", 1.0)),
        max_session_users=(None if max_session_users is None else int(max_session_users)),
        dataset=dataset,
    )


def load_config(path: Path) -> CFConfig:
    """Load `config.yaml` into a `CFConfig`."""
    return config_from_dict(_load_yaml(Path(path)))

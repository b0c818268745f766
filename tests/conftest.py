from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import movie_cf...` and `import helpers` work when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from helpers import vec  # noqa: E402
from movie_cf.store.ratings import RatingsStore  # noqa: E402
from movie_cf.user_cf.model import ItemMeta  # noqa: E402


@pytest.fixture()
def small_table() -> dict:
    return {
        1: vec((10, 5), (20, 3)),
        2: vec((10, 5), (20, 3), (30, 4)),
        3: vec((10, 1), (20, 1)),
    }


@pytest.fixture()
def small_catalog() -> dict:
    return {
        10: ItemMeta(title="Toy Story (1995)", genres="Adventure|Animation|Children|Comedy|Fantasy"),
        20: ItemMeta(title="Jumanji (1995)", genres="Adventure|Children|Fantasy"),
        30: ItemMeta(title="Heat (1995)", genres="Action|Crime|Thriller"),
        40: ItemMeta(title="Sabrina (1995)", genres="Comedy|Romance"),
    }


@pytest.fixture()
def small_store(small_table: dict, small_catalog: dict) -> RatingsStore:
    return RatingsStore(small_table, small_catalog)

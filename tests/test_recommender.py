from __future__ import annotations

import pytest

from helpers import vec
from movie_cf.config import CFConfig
from movie_cf.store.ratings import RatingsStore
from movie_cf.user_cf.model import ItemMeta, ItemRating
from movie_cf.user_cf.recommender import (
    NoRatingsProvidedError,
    UserUserCFRecommender,
    normalize_ratings,
    recommend,
)


def test_end_to_end_identical_pattern_neighbor_drives_prediction(small_store: RatingsStore) -> None:
    result = recommend([(10, 5), (20, 3)], small_store, k=2)

    assert result.userId == 4
    neighbor_ids = [n.userId for n in result.neighbors]
    assert 2 in neighbor_ids
    assert 3 not in neighbor_ids
    top_sim = result.neighbors[0].similarity
    assert next(n for n in result.neighbors if n.userId == 2).similarity == pytest.approx(top_sim)
    assert top_sim == pytest.approx(1.0)

    by_item = {p.itemId: p for p in result.items}
    assert by_item[30].predictedRating == 4.0
    assert by_item[30].title == "Heat (1995)"


def test_unrated_catalog_item_gets_fallback(small_store: RatingsStore) -> None:
    result = recommend([(10, 5), (20, 3)], small_store, k=2)
    by_item = {p.itemId: p for p in result.items}
    # Movie 40 has no ratings anywhere in the corpus.
    assert by_item[40].predictedRating == 1.0
    assert [p.itemId for p in result.items] == [30, 40]


def test_empty_ratings_rejected_before_store_is_touched(small_store: RatingsStore) -> None:
    with pytest.raises(NoRatingsProvidedError, match="No ratings provided"):
        recommend([], small_store, k=2)
    assert len(small_store) == 3


def test_never_returns_already_rated_and_caps_results() -> None:
    catalog = {mid: ItemMeta(title=f"Movie {mid}", genres="Drama") for mid in range(1, 31)}
    table = {
        1: vec(*[(m, (m % 5) + 1) for m in range(1, 25)]),
        2: vec(*[(m, ((m + 2) % 5) + 1) for m in range(1, 31)]),
        3: vec(*[(m, 5 - (m % 5)) for m in range(5, 31)]),
    }
    store = RatingsStore(table, catalog)
    mine = [(1, 2), (2, 3), (3, 4), (4, 5), (5, 1)]

    result = recommend(mine, store, k=10)

    rated = {m for m, _ in mine}
    assert len(result.items) <= 10
    assert not rated & {p.itemId for p in result.items}
    scores = [p.predictedRating for p in result.items]
    assert scores == sorted(scores, reverse=True)


def test_ties_keep_catalog_order(small_catalog: dict) -> None:
    store = RatingsStore({1: vec((99, 4))}, small_catalog)
    result = recommend([(10, 3)], store, k=5)
    # No neighbor rated anything in the catalog: all fall back to 1.0.
    assert [p.itemId for p in result.items] == [20, 30, 40]
    assert {p.predictedRating for p in result.items} == {1.0}


def test_registered_user_stays_in_store(small_store: RatingsStore) -> None:
    first = recommend([(10, 4)], small_store, k=2)
    second = recommend([(20, 2)], small_store, k=2)
    assert (first.userId, second.userId) == (4, 5)
    assert 4 in small_store and 5 in small_store
    assert small_store.get_user(4) == (ItemRating(itemId=10, rating=4.0),)


def test_normalize_ratings_accepts_mixed_inputs() -> None:
    got = normalize_ratings(
        [
            {"movieId": "10", "rating": "4"},
            {"itemId": 20, "rating": 2.5},
            (30, 1),
            ItemRating(itemId=10, rating=5.0),
        ]
    )
    # A repeated movie keeps its last rating.
    assert got == (
        ItemRating(itemId=10, rating=5.0),
        ItemRating(itemId=20, rating=2.5),
        ItemRating(itemId=30, rating=1.0),
    )


def test_non_positive_k_rejected_without_registering(small_store: RatingsStore) -> None:
    with pytest.raises(ValueError):
        recommend([(10, 5)], small_store, k=0)
    assert len(small_store) == 3


def test_recommender_facade_uses_config(small_store: RatingsStore) -> None:
    rec = UserUserCFRecommender(small_store, config=CFConfig(k=1, top_n=1))
    result = rec.recommend_for_new_user([{"movieId": 10, "rating": 5}, {"movieId": 20, "rating": 3}])
    assert len(result.neighbors) == 1
    assert len(result.items) == 1


def test_similar_users_for_existing_user(small_store: RatingsStore) -> None:
    rec = UserUserCFRecommender(small_store)
    sims = rec.similar_users(1, top_n=5)
    assert [s.userId for s in sims] == [2, 3]
    assert rec.has_user(1)
    with pytest.raises(KeyError):
        rec.similar_users(42)


def test_random_movies_is_seedable(small_store: RatingsStore) -> None:
    rec = UserUserCFRecommender(small_store)
    a = rec.random_movies(3, seed=7)
    b = rec.random_movies(3, seed=7)
    assert a == b
    assert len(a) == 3
    assert {m["movieId"] for m in a} <= set(small_store.catalog)
    assert len(rec.random_movies(100, seed=1)) == len(small_store.catalog)

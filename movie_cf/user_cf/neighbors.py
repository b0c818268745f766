from __future__ import annotations

from typing import Mapping

from .model import NeighborRecord, UserRatingVector
from .similarity import pearson_similarity


def find_neighbors(
    target_user_id: int,
    table: Mapping[int, UserRatingVector],
    k: int,
    *,
    mean_mode: str = "full_history",
) -> list[NeighborRecord]:
    """Return the `k` users most similar to `target_user_id`, most similar first.

    Every other user in `table` is scored; no similarity threshold is applied, so
    zero or negatively correlated users fill the neighborhood when few positive
    ones exist. Ties keep the table's iteration order (stable sort).
    """
    if int(k) < 1:
        raise ValueError(f"k must be a positive integer, got {k}")

    uid = int(target_user_id)
    if uid not in table:
        raise KeyError(f"Unknown userId: {uid}")

    target = table[uid]
    records: list[NeighborRecord] = []
    for other_id, ratings in table.items():
        if int(other_id) == uid:
            continue
        sim = pearson_similarity(target, ratings, mean_mode=mean_mode)
        records.append(NeighborRecord(userId=int(other_id), similarity=sim, ratings=ratings))

    records.sort(key=lambda r: r.similarity, reverse=True)
    return records[: int(k)]

"""Pearson correlation between two users' rating vectors."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..config import MEAN_MODES
from .model import ItemRating


def _mean_rating(ratings: Sequence[ItemRating]) -> float:
    if not ratings:
        return 0.0
    return float(np.mean([float(r.rating) for r in ratings]))


def pearson_similarity(
    a: Sequence[ItemRating],
    b: Sequence[ItemRating],
    *,
    mean_mode: str = "full_history",
) -> float:
    """Pearson correlation restricted to the items both users rated.

    With ``mean_mode="full_history"`` each user's mean is taken over their whole
    rating history, not just the co-rated items, so two users agreeing on a
    single item can still score a non-trivial +/-1. ``mean_mode="common_items"``
    gives the textbook variant with means over the co-rated subset.

    Returns 0.0 when the denominator vanishes (no co-rated items, or no variance
    in either restricted series). The result lies in [-1, 1].
    """
    if mean_mode not in MEAN_MODES:
        raise ValueError(f"Unsupported mean_mode: {mean_mode!r} (expected one of {MEAN_MODES})")

    a_by_item = {int(r.itemId): float(r.rating) for r in a}
    b_by_item = {int(r.itemId): float(r.rating) for r in b}
    # Accumulate in item-id order so sim(a, b) and sim(b, a) are bit-identical.
    common_ids = sorted(a_by_item.keys() & b_by_item.keys())
    common = [(a_by_item[i], b_by_item[i]) for i in common_ids]

    if mean_mode == "full_history":
        avg_a = _mean_rating(a)
        avg_b = _mean_rating(b)
    else:
        if not common:
            return 0.0
        avg_a = float(np.mean([ra for ra, _ in common]))
        avg_b = float(np.mean([rb for _, rb in common]))

    numerator = 0.0
    sum_sq_a = 0.0
    sum_sq_b = 0.0
    for rating_a, rating_b in common:
        dev_a = rating_a - avg_a
        dev_b = rating_b - avg_b
        numerator += dev_a * dev_b
        sum_sq_a += dev_a * dev_a
        sum_sq_b += dev_b * dev_b

    denom = sum_sq_a * sum_sq_b
    if denom == 0.0:
        return 0.0

    sim = numerator / math.sqrt(denom)
    # Floating-point noise can push |sim| a hair past 1.
    return float(min(1.0, max(-1.0, sim)))

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from .model import NeighborRecord

# Lowest rating on the 1-5 scale; signals "no usable neighbor signal".
FALLBACK_RATING = 1.0


def round_half_up(value: float, places: int = 1) -> float:
    """Round the exact binary value of `value` half-up (3.25 -> 3.3, 1.25 -> 1.3)."""
    quantum = Decimal(1).scaleb(-int(places))
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def predict_rating(
    item_id: int,
    neighbors: Sequence[NeighborRecord],
    *,
    fallback: float = FALLBACK_RATING,
) -> float:
    """Similarity-weighted average of the neighbors' ratings for `item_id`.

    Similarities are used as-is: a negatively correlated neighbor lowers both the
    weighted sum and the weight total, and can push the total to <= 0, in which
    case `fallback` is returned. Results are rounded half-up to one decimal place.
    """
    mid = int(item_id)
    weighted_sum = 0.0
    similarity_sum = 0.0
    for neighbor in neighbors:
        rating = neighbor.rating_by_item.get(mid)
        if rating is None:
            continue
        weighted_sum += float(rating) * float(neighbor.similarity)
        similarity_sum += float(neighbor.similarity)

    if similarity_sum > 0.0:
        return round_half_up(weighted_sum / similarity_sum, 1)
    return float(fallback)

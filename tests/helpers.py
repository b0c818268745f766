from __future__ import annotations

from movie_cf.user_cf.model import ItemRating


def vec(*pairs: tuple[int, float]) -> tuple[ItemRating, ...]:
    return tuple(ItemRating(itemId=int(m), rating=float(r)) for m, r in pairs)

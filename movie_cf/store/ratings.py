"""In-memory ratings corpus shared by recommendation requests."""

from __future__ import annotations

import logging
from collections import OrderedDict
from threading import Lock
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from ..user_cf.model import Catalog, ItemMeta, ItemRating, RatingsTable, UserRatingVector

logger = logging.getLogger(__name__)


class RatingsStore:
    """Ratings table + catalog, owned by whichever layer manages process lifetime.

    The table grows by one user per registration. Corpus users are never
    removed; registered users are dropped oldest-first only when
    `max_session_users` is set. Writers are serialized by a lock and publish a
    fresh dict on every insert, so a reader holding a `snapshot()` keeps
    iterating a table that never changes under it.
    """

    def __init__(
        self,
        table: RatingsTable,
        catalog: Catalog,
        *,
        max_session_users: Optional[int] = None,
    ) -> None:
        empty = [uid for uid, vec in table.items() if not vec]
        if empty:
            raise ValueError(f"Ratings table has users with no ratings: {empty[:10]}")

        self._table: dict[int, UserRatingVector] = {int(uid): tuple(vec) for uid, vec in table.items()}
        self._catalog: Mapping[int, ItemMeta] = MappingProxyType(dict(catalog))
        self._write_lock = Lock()
        self._session_users: "OrderedDict[int, None]" = OrderedDict()
        self.max_session_users = max_session_users

    @property
    def catalog(self) -> Mapping[int, ItemMeta]:
        return self._catalog

    def snapshot(self) -> Mapping[int, UserRatingVector]:
        """Read-only view of the current table; later inserts are not reflected in it."""
        return MappingProxyType(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._table

    def get_user(self, user_id: int) -> UserRatingVector:
        uid = int(user_id)
        table = self._table
        if uid not in table:
            raise KeyError(f"Unknown userId: {uid}")
        return table[uid]

    @property
    def session_user_count(self) -> int:
        return len(self._session_users)

    def register_user(self, ratings: Sequence[ItemRating]) -> tuple[int, Mapping[int, UserRatingVector]]:
        """Register a new user; return its id and the table snapshot that contains it."""
        vector = tuple(ratings)
        if not vector:
            raise ValueError("Cannot register a user with no ratings")

        with self._write_lock:
            table = dict(self._table)
            if self.max_session_users is not None:
                while len(self._session_users) >= int(self.max_session_users):
                    evicted, _ = self._session_users.popitem(last=False)
                    table.pop(evicted, None)
                    logger.info("Evicted session user %d (cap=%d)", evicted, int(self.max_session_users))

            # An empty corpus starts numbering at 1.
            new_id = (max(table) + 1) if table else 1
            table[new_id] = vector
            self._session_users[new_id] = None
            self._table = table

        logger.info(
            "Registered user %d with %d ratings (session users=%d, total users=%d)",
            new_id,
            len(vector),
            self.session_user_count,
            len(table),
        )
        return new_id, MappingProxyType(table)

"""
Learned value store for the personalized scorer.

Entries are keyed by (user, station, hour) and laid out as a three-level
lookup: user -> station -> hour -> QEntry. Users are held in an LRU cache so
a long-running process keeps a bounded number of them; evicting a user drops
all of that user's entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from cachetools import LRUCache

from ..tools.locks import ReadWriteLock


logger = logging.getLogger(__name__)

UserTable = Dict[int, Dict[int, "QEntry"]]


class QKey(NamedTuple):
    user_id: int
    station_id: int
    hour: int


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class QEntry:
    """
    Learned value for one (user, station, hour).

    Attributes:
        station_id: Station the value belongs to
        hour: Hour of day the value belongs to
        day_of_week: Weekday of the most recent update (Sunday=0)
        q_value: Current learned value
        visit_count: Number of updates applied
        last_updated: Time of the most recent update (UTC)
    """
    station_id: int
    hour: int
    day_of_week: int = 0
    q_value: float = 0.0
    visit_count: int = 0
    last_updated: datetime = field(default_factory=utcnow)


class _UserLRU(LRUCache):
    """LRUCache that reports evictions so the entry count stays exact."""

    def __init__(self, maxsize: int, on_evict: Callable[[int, UserTable], None]):
        super().__init__(maxsize=maxsize)
        self._on_evict = on_evict

    def popitem(self):
        user_id, table = super().popitem()
        self._on_evict(user_id, table)
        return user_id, table


class QTableStore:
    """
    Thread-safe Q-value store.

    Reads share a reader/writer lock; ``upsert`` holds it exclusively. Values
    handed out by ``get`` are copies, so callers never observe a half-applied
    update.
    """

    def __init__(self, max_users: int = 100_000):
        self._lock = ReadWriteLock()
        self._entry_count = 0
        self._users: _UserLRU = _UserLRU(maxsize=max_users, on_evict=self._evicted)

    @property
    def max_users(self) -> int:
        return int(self._users.maxsize)

    def _evicted(self, user_id: int, table: UserTable) -> None:
        # Only reached from write-locked paths (upsert, clear)
        dropped = sum(len(hours) for hours in table.values())
        self._entry_count -= dropped
        logger.debug(f"Evicted Q-table for user {user_id} ({dropped} entries)")

    def get(self, key: QKey) -> Optional[QEntry]:
        """Copy of the entry for ``key``, or None if it was never updated."""
        with self._lock.read_locked():
            entry = self._lookup(key.user_id, key.station_id, key.hour)
            return replace(entry) if entry is not None else None

    def values_for(self, user_id: int, station_ids: Iterable[int], hour: int) -> List[float]:
        """
        Learned values for many stations of one user and hour.

        Missing entries read as 0.0 and are not created.
        """
        with self._lock.read_locked():
            stations = self._users.get(user_id)
            if stations is None:
                return [0.0 for _ in station_ids]
            values = []
            for station_id in station_ids:
                entry = stations.get(station_id, {}).get(hour)
                values.append(entry.q_value if entry is not None else 0.0)
            return values

    def upsert(self, key: QKey, fn: Callable[[QEntry], None]) -> QEntry:
        """
        Apply ``fn`` to the entry for ``key`` under the write lock.

        A zero-valued entry is created first when the key is new.

        Returns:
            Copy of the entry after ``fn`` ran
        """
        with self._lock.write_locked():
            stations = self._users.get(key.user_id)
            if stations is None:
                stations = {}
                # May evict the least recently used user
                self._users[key.user_id] = stations
            hours = stations.setdefault(key.station_id, {})
            entry = hours.get(key.hour)
            if entry is None:
                entry = QEntry(station_id=key.station_id, hour=key.hour)
                hours[key.hour] = entry
                self._entry_count += 1
            fn(entry)
            return replace(entry)

    def size(self) -> int:
        """Total number of (user, station, hour) entries."""
        with self._lock.read_locked():
            return self._entry_count

    def user_count(self) -> int:
        with self._lock.read_locked():
            return len(self._users)

    def clear(self) -> None:
        with self._lock.write_locked():
            self._users.clear()
            self._entry_count = 0

    def _lookup(self, user_id: int, station_id: int, hour: int) -> Optional[QEntry]:
        stations = self._users.get(user_id)
        if stations is None:
            return None
        return stations.get(station_id, {}).get(hour)

"""Small in-memory TTL cache with insertion-order eviction.

Each entry carries its own TTL. Expired entries are dropped lazily on read
(or eagerly via prune). When the cache is full, inserting a new key evicts
the oldest *inserted* entry; reads do not refresh position (not an LRU).
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    value: T
    stored_at: float  # time.monotonic()
    ttl: float
    key: str

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class TTLCache(Generic[T]):
    def __init__(self, *, ttl_seconds: float, maxsize: int = 200) -> None:
        self._ttl = float(ttl_seconds)
        self._maxsize = max(1, int(maxsize))
        self._store: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def get(self, key: str) -> Optional[T]:
        entry = self._store.get(key)
        if entry is None:
            return None

        # Expire entries using time.monotonic to avoid wall-clock shifts
        if entry.is_expired(time.monotonic()):
            self._store.pop(key, None)
            return None

        return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        if key not in self._store and len(self._store) >= self._maxsize:
            # Evict exactly one entry: the oldest inserted
            self._store.popitem(last=False)

        self._store[key] = CacheEntry(
            value=value,
            stored_at=time.monotonic(),
            ttl=self._ttl if ttl is None else float(ttl),
            key=key,
        )

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def prune(self) -> int:
        """Remove all expired entries; returns how many were dropped."""
        now = time.monotonic()
        expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
        for k in expired:
            del self._store[k]
        return len(expired)

    def clear(self) -> None:
        self._store.clear()

    def size(self) -> int:
        return len(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> Dict[str, object]:
        return {
            "size": len(self._store),
            "maxsize": self._maxsize,
            "usage_percent": round(len(self._store) / self._maxsize * 100, 2),
        }

"""Striped hash map: per-stripe read-write locks over plain dicts.

Each key maps to a stripe via: stripe_index = hash(key) & (N - 1).
Lookups for different domains only contend when they land on the same
stripe, so concurrent Get calls for many domains scale with the stripe
count rather than queueing on one lock.

num_stripes must be a power of two so the stripe index is a bitmask.
"""
from __future__ import annotations

from typing import Generic, TypeVar

from mtasts_cache.concurrency.rwlock import ReadWriteLock

K = TypeVar("K")
V = TypeVar("V")


class StripedMap(Generic[K, V]):
    """Thread-safe hash map with striped read-write locks.

    Args:
        num_stripes: Number of lock stripes (default 16, must be power of 2).
    """

    def __init__(self, num_stripes: int = 16) -> None:
        if num_stripes <= 0 or (num_stripes & (num_stripes - 1)) != 0:
            raise ValueError("num_stripes must be a positive power of 2")
        self._num_stripes = num_stripes
        self._stripes: list[dict[K, V]] = [{} for _ in range(num_stripes)]
        self._locks: list[ReadWriteLock] = [
            ReadWriteLock() for _ in range(num_stripes)
        ]
        self._mask = num_stripes - 1

    def get(self, key: K) -> V | None:
        idx = self._stripe_index(key)
        with self._locks[idx].read():
            return self._stripes[idx].get(key)

    def put(self, key: K, value: V) -> None:
        idx = self._stripe_index(key)
        with self._locks[idx].write():
            self._stripes[idx][key] = value

    def size(self) -> int:
        """Total entries across all stripes.

        Acquires each read lock in turn, so the total is approximate
        under concurrent writes.
        """
        total = 0
        for i in range(self._num_stripes):
            with self._locks[i].read():
                total += len(self._stripes[i])
        return total

    def keys(self) -> list[K]:
        """Snapshot of all keys. Same caveat as size(): not atomic."""
        result: list[K] = []
        for i in range(self._num_stripes):
            with self._locks[i].read():
                result.extend(self._stripes[i].keys())
        return result

    def _stripe_index(self, key: K) -> int:
        return hash(key) & self._mask

"""Thread-safe primitives shared by the stores.

  - ReadWriteLock: multiple readers OR one writer, writer preference
  - StripedMap: hash-partitioned locking for the in-memory policy store
"""
from mtasts_cache.concurrency.rwlock import ReadWriteLock
from mtasts_cache.concurrency.striped_map import StripedMap

__all__ = [
    "ReadWriteLock",
    "StripedMap",
]

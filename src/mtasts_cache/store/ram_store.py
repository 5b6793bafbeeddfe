"""In-memory policy store backed by a StripedMap.

Safe for concurrent use: every operation takes the
read or write lock of the key's stripe only, so lookups for different
domains rarely contend. Records are immutable dataclasses, so a record
returned by load() can be used outside the lock.

Contents are lost on restart. Caching across restarts matters for the
MTA-STS security model; prefer FSPolicyStore for long-running senders.
"""
from __future__ import annotations

from datetime import datetime

from mtasts_cache.concurrency.striped_map import StripedMap
from mtasts_cache.domain.errors import NoPolicyError
from mtasts_cache.domain.policy import CacheRecord, Policy
from mtasts_cache.domain.types import DomainName, PolicyId
from mtasts_cache.store.base import PolicyStore


class RAMPolicyStore(PolicyStore):
    """Thread-safe in-memory store.

    Args:
        num_stripes: Number of lock stripes (power of 2).
    """

    def __init__(self, num_stripes: int = 16) -> None:
        self._records: StripedMap[DomainName, CacheRecord] = StripedMap(num_stripes)

    def list(self) -> list[DomainName]:
        return self._records.keys()

    def store(
        self, key: DomainName, id: PolicyId, fetch_time: datetime, policy: Policy
    ) -> None:
        self._records.put(key, CacheRecord(id=id, fetch_time=fetch_time, policy=policy))

    def load(self, key: DomainName) -> CacheRecord:
        record = self._records.get(key)
        if record is None:
            raise NoPolicyError(f"no cached policy for {key}")
        return record

    def __len__(self) -> int:
        return self._records.size()

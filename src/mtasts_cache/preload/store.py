"""PolicyStore decorator that falls back to a preload list.

PreloadBackedStore sits between PolicyCache and the real store. Loads
that find nothing in the real store are answered from the active
preload list; everything else passes straight through, and
preload-derived records are never written back.

The active list is a single immutable snapshot behind a ReadWriteLock:
load() takes the read lock once per delivery attempt, update() takes
the write lock a few times a day.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from mtasts_cache.concurrency.rwlock import ReadWriteLock
from mtasts_cache.domain.errors import DowngradeRejected, NoPolicyError
from mtasts_cache.domain.policy import CacheRecord, Policy, RecordSource
from mtasts_cache.domain.types import DomainName, PolicyId
from mtasts_cache.preload.preload_list import PreloadList
from mtasts_cache.store.base import PolicyStore

log = logging.getLogger(__name__)

# No DNS marker id can contain NUL, so a preloaded record never looks
# fresh to the marker comparison and is replaced by the first real fetch.
PRELOADED_ID: PolicyId = "\x00PRELOADED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PreloadBackedStore(PolicyStore):
    """Wrap inner with plist as a downgrade-protected fallback source.

    Args:
        inner: The primary store.
        plist: Initially active preload list.
        clock: Returns the current UTC time. Injected by tests.
    """

    def __init__(
        self,
        inner: PolicyStore,
        plist: PreloadList,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._inner = inner
        self._list = plist
        self._lock = ReadWriteLock()
        self._clock = clock or _utcnow

    @property
    def inner(self) -> PolicyStore:
        return self._inner

    @property
    def active_list(self) -> PreloadList:
        with self._lock.read():
            return self._list

    def list(self) -> list[DomainName]:
        return self._inner.list()

    def store(
        self, key: DomainName, id: PolicyId, fetch_time: datetime, policy: Policy
    ) -> None:
        self._inner.store(key, id, fetch_time, policy)

    def load(self, key: DomainName) -> CacheRecord:
        try:
            return self._inner.load(key)
        except NoPolicyError:
            pass  # fall back to the preload list; StorageError propagates

        now = self._clock()
        with self._lock.read():
            plist = self._list
            if plist.expired(now):
                raise NoPolicyError(f"no cached policy for {key}, preload list expired")
            entry = plist.lookup(key)
            if entry is None:
                raise NoPolicyError(f"no cached or preloaded policy for {key}")
            policy = entry.sts(plist, now)

        if policy.max_age <= 0:
            raise NoPolicyError(f"preloaded policy for {key} has expired")
        return CacheRecord(
            id=PRELOADED_ID,
            fetch_time=now,
            policy=policy,
            source=RecordSource.PRELOAD,
        )

    def update(self, new_list: PreloadList) -> None:
        """Replace the active list.

        Rejects lists that are already expired or older than the active
        one; otherwise an attacker replaying an old, validly signed list
        could roll a domain's mode back. The previous list stays active
        on rejection.

        Raises DowngradeRejected.
        """
        now = self._clock()
        with self._lock.write():
            if new_list.expired(now):
                log.warning("Rejected preload list: expired at %s",
                            new_list.expires.isoformat())
                raise DowngradeRejected("the new preload list is expired")
            if new_list.timestamp < self._list.timestamp:
                log.warning("Rejected preload list: timestamp %s older than active %s",
                            new_list.timestamp.isoformat(),
                            self._list.timestamp.isoformat())
                raise DowngradeRejected(
                    "the new preload list is older than the active one"
                )
            self._list = new_list

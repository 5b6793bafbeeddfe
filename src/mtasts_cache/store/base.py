"""Abstract base for policy stores.

FSPolicyStore, RAMPolicyStore, NopPolicyStore and PreloadBackedStore
implement this interface. PolicyCache only talks to it, so storage
backends can be swapped without touching the fetch algorithm.

Implementations must tolerate concurrent load()/store() calls for the
same key: PolicyCache does no per-domain serialisation of its own.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from mtasts_cache.domain.policy import CacheRecord, Policy
from mtasts_cache.domain.types import DomainName, PolicyId


class PolicyStore(ABC):
    """Durable domain -> (id, fetch time, policy) persistence."""

    @abstractmethod
    def list(self) -> list[DomainName]:
        """Return every domain key currently stored. Used by refresh()."""
        ...

    @abstractmethod
    def store(
        self, key: DomainName, id: PolicyId, fetch_time: datetime, policy: Policy
    ) -> None:
        """Persist a record atomically. Raises StorageError on failure.

        Readers must never observe a partially written record.
        """
        ...

    @abstractmethod
    def load(self, key: DomainName) -> CacheRecord:
        """Return the stored record for key.

        Raises NoPolicyError if nothing was ever stored for key, and
        StorageError for any other failure.
        """
        ...

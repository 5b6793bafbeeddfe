"""Store that remembers nothing.

Every lookup repeats DNS and HTTPS discovery. Only useful in tests:
without a cache there is no downgrade protection at all.
"""
from __future__ import annotations

from datetime import datetime

from mtasts_cache.domain.errors import NoPolicyError
from mtasts_cache.domain.policy import CacheRecord, Policy
from mtasts_cache.domain.types import DomainName, PolicyId
from mtasts_cache.store.base import PolicyStore


class NopPolicyStore(PolicyStore):

    def list(self) -> list[DomainName]:
        return []

    def store(
        self, key: DomainName, id: PolicyId, fetch_time: datetime, policy: Policy
    ) -> None:
        pass

    def load(self, key: DomainName) -> CacheRecord:
        raise NoPolicyError(f"no cached policy for {key}")

"""Runtime settings for building a PolicyCache.

All knobs are plain constructor arguments elsewhere in the package;
CacheSettings just collects them with their defaults so the CLI and
embedding applications build caches the same way.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from mtasts_cache.cache.policy_cache import PolicyCache
from mtasts_cache.discovery.fetcher import DEFAULT_MAX_POLICY_BYTES, HTTPSPolicyFetcher
from mtasts_cache.discovery.resolver import DNSPythonResolver
from mtasts_cache.preload.preload_list import PreloadList
from mtasts_cache.preload.store import PreloadBackedStore
from mtasts_cache.store.base import PolicyStore
from mtasts_cache.store.fs_store import FSPolicyStore
from mtasts_cache.store.ram_store import RAMPolicyStore


@dataclass(frozen=True, slots=True)
class CacheSettings:
    """Settings for a PolicyCache.

    cache_dir: Directory for FSPolicyStore. None keeps policies in RAM.
    dns_timeout: Lifetime of one TXT lookup, seconds.
    fetch_timeout: HTTPS policy fetch timeout, seconds.
    refresh_period: How often the embedding application calls refresh().
    max_policy_bytes: Largest policy document accepted.
    """
    cache_dir: Path | None = None
    dns_timeout: float = 10.0
    fetch_timeout: float = 60.0
    refresh_period: timedelta = timedelta(hours=12)
    max_policy_bytes: int = DEFAULT_MAX_POLICY_BYTES

    def __post_init__(self) -> None:
        if self.dns_timeout <= 0 or self.fetch_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if self.refresh_period <= timedelta(0):
            raise ValueError("refresh_period must be positive")

    @property
    def refresh_lookahead(self) -> timedelta:
        """Half the refresh period, see PolicyCache.refresh()."""
        return self.refresh_period / 2

    def create_store(self, preload: PreloadList | None = None) -> PolicyStore:
        store: PolicyStore
        if self.cache_dir is not None:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            store = FSPolicyStore(self.cache_dir)
        else:
            store = RAMPolicyStore()
        if preload is not None:
            store = PreloadBackedStore(store, preload)
        return store

    def create_cache(self, preload: PreloadList | None = None) -> PolicyCache:
        """Build a PolicyCache with the default resolver and fetcher."""
        return PolicyCache(
            store=self.create_store(preload),
            resolver=DNSPythonResolver(timeout=self.dns_timeout),
            fetcher=HTTPSPolicyFetcher(
                timeout=self.fetch_timeout, max_bytes=self.max_policy_bytes
            ),
            refresh_lookahead=self.refresh_lookahead,
        )

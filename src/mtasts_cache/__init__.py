"""mtasts_cache: client-side MTA-STS policy discovery and caching.

    from mtasts_cache import PolicyCache, FSPolicyStore

    cache = PolicyCache(FSPolicyStore("/var/lib/mtasts"))
    policy = cache.get("example.com")
"""
from mtasts_cache.cache.policy_cache import PolicyCache
from mtasts_cache.config import CacheSettings
from mtasts_cache.domain import (
    CacheRecord,
    DowngradeRejected,
    Mode,
    MTASTSError,
    NoPolicyError,
    Policy,
    StorageError,
    TransientResolutionError,
    for_lookup,
)
from mtasts_cache.preload import PreloadBackedStore, PreloadList, load_list
from mtasts_cache.store import FSPolicyStore, NopPolicyStore, PolicyStore, RAMPolicyStore

__all__ = [
    "PolicyCache",
    "CacheSettings",
    "CacheRecord",
    "DowngradeRejected",
    "Mode",
    "MTASTSError",
    "NoPolicyError",
    "Policy",
    "StorageError",
    "TransientResolutionError",
    "for_lookup",
    "PreloadBackedStore",
    "PreloadList",
    "load_list",
    "FSPolicyStore",
    "NopPolicyStore",
    "PolicyStore",
    "RAMPolicyStore",
]

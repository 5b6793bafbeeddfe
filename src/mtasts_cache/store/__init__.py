"""Policy store implementations: filesystem, in-memory and no-op."""
from mtasts_cache.store.base import PolicyStore
from mtasts_cache.store.fs_store import FSPolicyStore
from mtasts_cache.store.nop_store import NopPolicyStore
from mtasts_cache.store.ram_store import RAMPolicyStore

__all__ = [
    "PolicyStore",
    "FSPolicyStore",
    "NopPolicyStore",
    "RAMPolicyStore",
]

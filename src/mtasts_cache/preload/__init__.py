"""Preload list support: parsing, lookups, the fallback store, download."""
from mtasts_cache.preload.download import Source, download, refresh_preload
from mtasts_cache.preload.preload_list import (
    PreloadEntry,
    PreloadList,
    load_list,
    read_list,
)
from mtasts_cache.preload.signature import Ed25519Verifier, SignatureVerifier
from mtasts_cache.preload.sources import STARTTLS_EVERYWHERE
from mtasts_cache.preload.store import PRELOADED_ID, PreloadBackedStore

__all__ = [
    "Source",
    "download",
    "refresh_preload",
    "PreloadEntry",
    "PreloadList",
    "load_list",
    "read_list",
    "Ed25519Verifier",
    "SignatureVerifier",
    "STARTTLS_EVERYWHERE",
    "PRELOADED_ID",
    "PreloadBackedStore",
]

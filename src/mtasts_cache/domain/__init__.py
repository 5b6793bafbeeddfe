"""Domain model for mtasts_cache.

Re-exports all public types for convenient access:
    from mtasts_cache.domain import Policy, CacheRecord, NoPolicyError
"""
from mtasts_cache.domain.canonical import for_lookup, to_ascii
from mtasts_cache.domain.errors import (
    DowngradeRejected,
    FetchError,
    MTASTSError,
    NoPolicyError,
    PolicySyntaxError,
    PreloadDownloadError,
    PreloadFormatError,
    ResolutionError,
    SignatureError,
    StorageError,
    TransientResolutionError,
)
from mtasts_cache.domain.policy import (
    CacheRecord,
    Mode,
    Policy,
    RecordSource,
    parse_policy,
)
from mtasts_cache.domain.types import MAX_MAX_AGE, DomainName, PolicyId, Seconds

__all__ = [
    "for_lookup",
    "to_ascii",
    "DowngradeRejected",
    "FetchError",
    "MTASTSError",
    "NoPolicyError",
    "PolicySyntaxError",
    "PreloadDownloadError",
    "PreloadFormatError",
    "ResolutionError",
    "SignatureError",
    "StorageError",
    "TransientResolutionError",
    "CacheRecord",
    "Mode",
    "Policy",
    "RecordSource",
    "parse_policy",
    "MAX_MAX_AGE",
    "DomainName",
    "PolicyId",
    "Seconds",
]

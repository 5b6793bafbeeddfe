"""Exception hierarchy for policy discovery, caching and preloading.

Every error raised by this package derives from MTASTSError so that
batch callers (PolicyCache.refresh) can catch exactly our failures and
let programming errors propagate.
"""
from __future__ import annotations


class MTASTSError(Exception):
    """Base class for all mtasts_cache errors."""


class NoPolicyError(MTASTSError):
    """No MTA-STS policy applies to the domain right now.

    Covers true absence, an unusable DNS marker without a valid cached
    policy, and a failed fetch without a fallback. Stores also raise it
    from load() to signal "never cached".
    """

    def __init__(self, message: str = "no policy") -> None:
        super().__init__(message)


class StorageError(MTASTSError):
    """PolicyStore I/O failure, distinct from "never cached"."""


class ResolutionError(MTASTSError):
    """DNS lookup failure reported by a DomainResolver.

    permanent is True for negative answers (NXDOMAIN, no TXT data) and
    False for timeouts, SERVFAIL and similar conditions worth retrying.
    """

    def __init__(self, message: str, permanent: bool) -> None:
        super().__init__(message)
        self.permanent = permanent


class TransientResolutionError(MTASTSError):
    """Temporary DNS failure with no cached policy to fall back to."""


class FetchError(MTASTSError):
    """Policy host could not deliver a usable policy document."""


class PolicySyntaxError(FetchError):
    """Policy text or DNS marker is syntactically invalid."""


class DowngradeRejected(MTASTSError):
    """A candidate preload list is expired or older than the active one."""


class PreloadFormatError(MTASTSError):
    """Preload list document does not match the expected schema."""


class PreloadDownloadError(MTASTSError):
    """Preload list could not be downloaded."""


class SignatureError(PreloadDownloadError):
    """Preload list signature is missing or does not verify."""

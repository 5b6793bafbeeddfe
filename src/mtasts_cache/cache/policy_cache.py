"""Downgrade-resistant MTA-STS policy cache.

PolicyCache decides, for one domain, whether to trust the cached policy,
refetch it from the policy host, or conclude that no policy applies.
The outcome table is the whole security model:

  - DNS or HTTPS disruption never erases a still-valid cached policy
  - a changed DNS marker id always triggers a refetch
  - only a successfully fetched replacement, or natural max_age expiry
    with nothing to fall back on, changes what is trusted

See RFC 8461 sections 5.1 and 10.2.

PolicyCache keeps no mutable state of its own. Thread safety is that of
the store, resolver and fetcher it is given. Concurrent callers for the
same domain may each run the algorithm; the fetch is idempotent, and
the store is the only serialisation point.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from mtasts_cache.discovery.fetcher import HTTPSPolicyFetcher, PolicyFetcher
from mtasts_cache.discovery.record import parse_dns_record
from mtasts_cache.discovery.resolver import DNSPythonResolver, DomainResolver
from mtasts_cache.domain.canonical import for_lookup
from mtasts_cache.domain.errors import (
    FetchError,
    MTASTSError,
    NoPolicyError,
    PolicySyntaxError,
    ResolutionError,
    StorageError,
    TransientResolutionError,
)
from mtasts_cache.domain.policy import CacheRecord, Policy, RecordSource
from mtasts_cache.domain.types import DomainName
from mtasts_cache.store.base import PolicyStore

log = logging.getLogger(__name__)

# Half of the intended 12 hour refresh period.
DEFAULT_REFRESH_LOOKAHEAD = timedelta(hours=6)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PolicyCache:
    """Transparent MTA-STS policy caching over a PolicyStore.

    This is the only supported way to obtain policies: without the
    cache an attacker who can block DNS or HTTPS can strip a policy.

    Args:
        store: Where records live. Wrap it in PreloadBackedStore to use
            a preload list as a fallback source.
        resolver: TXT lookups (default: DNSPythonResolver()).
        fetcher: Policy retrieval (default: HTTPSPolicyFetcher()).
        clock: Returns the current UTC time. Injected by tests.
        refresh_lookahead: How far refresh() looks ahead when deciding
            that a policy is about to expire.
    """

    def __init__(
        self,
        store: PolicyStore,
        resolver: DomainResolver | None = None,
        fetcher: PolicyFetcher | None = None,
        clock: Callable[[], datetime] | None = None,
        refresh_lookahead: timedelta = DEFAULT_REFRESH_LOOKAHEAD,
    ) -> None:
        self.store = store
        self.resolver = resolver or DNSPythonResolver()
        self.fetcher = fetcher or HTTPSPolicyFetcher()
        self._clock = clock or _utcnow
        self._refresh_lookahead = refresh_lookahead

    def close(self) -> None:
        """Close the fetcher, releasing its connection pool."""
        self.fetcher.close()

    def __enter__(self) -> PolicyCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(self, domain: DomainName, timeout: float | None = None) -> Policy:
        """Return the policy for domain, from cache or the policy host.

        Raises NoPolicyError if no policy applies, and
        TransientResolutionError if DNS failed temporarily and nothing
        valid was cached. The caller owns any retry policy.
        """
        key, err = for_lookup(domain)
        if err is not None:
            log.debug("Using degraded lookup form %r for %r: %s", key, domain, err)
        _, policy = self._fetch(key, self._clock(), timeout=timeout)
        return policy

    def refresh(self) -> int:
        """Re-run the fetch algorithm for every stored domain.

        Meant to be called every 12 hours. Policies expiring within the
        look-ahead window are treated as expired already, so they are
        refetched now instead of lapsing until the next run.

        Per-domain failures are logged and skipped. Only a failure to
        list the store propagates. Returns the number of domains
        refreshed without error.
        """
        keys = self.store.list()
        ok = 0
        for key in keys:
            now = self._clock() + self._refresh_lookahead
            try:
                self._fetch(key, now)
            except MTASTSError as err:
                log.debug("Refresh of %s failed: %s", key, err)
                continue
            ok += 1
        log.debug("Refreshed %d of %d cached policies", ok, len(keys))
        return ok

    def _fetch(
        self,
        domain: DomainName,
        now: datetime,
        ignore_dns: bool = False,
        timeout: float | None = None,
    ) -> tuple[bool, Policy]:
        """Run the decision algorithm. Returns (cache_hit, policy).

        ignore_dns skips the marker lookup and forces a refetch. No
        caller sets it today.
        """
        # 1. Load
        cached: CacheRecord | None = None
        try:
            cached = self.store.load(domain)
        except NoPolicyError:
            pass
        except StorageError as err:
            log.warning("Cannot load cached policy for %s: %s", domain, err)
        valid_cache = cached is not None and cached.is_valid(now)

        # 2. DNS marker
        dns_id: str | None = None
        if not ignore_dns:
            try:
                records = self.resolver.lookup_txt("_mta-sts." + domain, timeout=timeout)
            except ResolutionError as err:
                if valid_cache:
                    log.debug("DNS failed for %s, serving cached policy: %s", domain, err)
                    return True, cached.policy
                if err.permanent:
                    raise NoPolicyError(f"{domain}: no policy marker") from err
                raise TransientResolutionError(str(err)) from err

            # Zero or several markers, or garbage, means "no policy
            # observable right now". That is not a revocation.
            if len(records) != 1:
                if valid_cache:
                    return True, cached.policy
                raise NoPolicyError(f"{domain}: {len(records)} policy markers")
            try:
                dns_id = parse_dns_record(records[0])
            except PolicySyntaxError as err:
                if valid_cache:
                    return True, cached.policy
                raise NoPolicyError(f"{domain}: {err}") from err

        # 3. Refetch decision
        if (
            valid_cache
            and not ignore_dns
            and cached.source is RecordSource.DNS
            and dns_id == cached.id
        ):
            return True, cached.policy

        # 4. Refetch
        log.debug("Fetching policy for %s (marker id %s)", domain, dns_id)
        try:
            policy = self.fetcher.fetch(domain, timeout=timeout)
        except FetchError as err:
            if valid_cache:
                log.debug("Fetch failed for %s, serving cached policy: %s", domain, err)
                return True, cached.policy
            raise NoPolicyError(f"{domain}: {err}") from err

        try:
            self.store.store(domain, dns_id or "", self._clock(), policy)
        except StorageError as err:
            # The fresh policy is still authoritative for this lookup.
            log.warning("Cannot cache policy for %s: %s", domain, err)
        return False, policy

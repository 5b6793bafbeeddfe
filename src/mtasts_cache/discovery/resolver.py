"""DNS TXT lookups for the policy marker.

DomainResolver is the seam PolicyCache depends on; DNSPythonResolver is
the default implementation on top of dnspython. Resolvers report
failures as ResolutionError and tell permanent negative answers apart
from transient trouble, because the fetch algorithm treats them
differently when nothing is cached.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import dns.exception
import dns.name
import dns.resolver

from mtasts_cache.domain.errors import ResolutionError

log = logging.getLogger(__name__)

# Negative answers and names that can never resolve.
_PERMANENT_ERRORS = (
    dns.resolver.NXDOMAIN,
    dns.resolver.NoAnswer,
    dns.resolver.YXDOMAIN,
    dns.name.EmptyLabel,
    dns.name.LabelTooLong,
    dns.name.NameTooLong,
    dns.name.IDNAException,
)


class DomainResolver(ABC):
    """TXT record lookup. Implementations must be safe for concurrent use."""

    @abstractmethod
    def lookup_txt(self, name: str, timeout: float | None = None) -> list[str]:
        """Return the TXT records at name, one string per record.

        Raises ResolutionError. timeout bounds the whole lookup.
        """
        ...


class DNSPythonResolver(DomainResolver):
    """Resolver backed by dns.resolver.Resolver.

    Args:
        resolver: Preconfigured dnspython resolver (default: system config).
        timeout: Lifetime of a lookup when the caller passes none.
    """

    def __init__(
        self,
        resolver: dns.resolver.Resolver | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._resolver = resolver or dns.resolver.Resolver()
        self._timeout = timeout

    def lookup_txt(self, name: str, timeout: float | None = None) -> list[str]:
        lifetime = self._timeout if timeout is None else timeout
        try:
            answer = self._resolver.resolve(
                name, "TXT", lifetime=lifetime, search=False
            )
        except _PERMANENT_ERRORS as err:
            raise ResolutionError(f"{name}: {err}", permanent=True) from err
        except dns.exception.DNSException as err:
            # Timeout, NoNameservers (SERVFAIL/REFUSED) and friends.
            log.debug("Transient DNS failure for %s: %s", name, err)
            raise ResolutionError(f"{name}: {err}", permanent=False) from err

        # A TXT record may be split into several character-strings.
        return [
            b"".join(rdata.strings).decode("utf-8", errors="replace")
            for rdata in answer
        ]

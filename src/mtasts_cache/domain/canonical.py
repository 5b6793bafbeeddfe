"""Domain canonicalisation for table lookups and comparisons.

Use for_lookup() instead of str.lower() whenever a domain is used as a
cache key or compared against policy patterns.
"""
from __future__ import annotations

import unicodedata

import idna


def for_lookup(domain: str) -> tuple[str, Exception | None]:
    """Convert a domain into its canonical comparison form.

    Steps: decode A-labels to U-labels, NFC-normalise, lowercase, strip
    one trailing root dot.

    Domains that fail IDNA decoding are only lowercased, and the decode
    error is returned alongside so the caller can log it. This never
    raises: a bad name degrades the lookup key, it does not abort the
    lookup.
    """
    try:
        u_domain = idna.decode(domain, uts46=True)
    except (idna.IDNAError, UnicodeError, ValueError) as err:
        return domain.lower(), err

    # str.lower() is not full case folding; normalise first.
    u_domain = unicodedata.normalize("NFC", u_domain)
    u_domain = u_domain.lower()
    if u_domain.endswith("."):
        u_domain = u_domain[:-1]
    return u_domain, None


def to_ascii(domain: str) -> str | None:
    """Return the lowercase A-label form of domain, or None if invalid."""
    try:
        return idna.encode(domain, uts46=True).decode("ascii").lower()
    except (idna.IDNAError, UnicodeError, ValueError):
        return None

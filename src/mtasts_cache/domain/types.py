"""Shared type aliases and constants used across the domain."""
from __future__ import annotations

from typing import TypeAlias

DomainName: TypeAlias = str
PolicyId: TypeAlias = str  # opaque id from the _mta-sts TXT marker
Seconds: TypeAlias = int

# RFC 8461 section 3.2: max_age is capped at one year.
MAX_MAX_AGE: Seconds = 31_557_600

"""Policy entity: the structured form of an MTA-STS policy document.

A policy contains:
  - A mode (none, testing, enforce)
  - max_age, the validity period in seconds from fetch time
  - MX patterns, either exact hostnames or "*.suffix" wildcards

CacheRecord wraps a policy with the DNS marker id it was fetched under
and where it came from. Records are immutable; the store replaces them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from mtasts_cache.domain.canonical import for_lookup
from mtasts_cache.domain.errors import PolicySyntaxError
from mtasts_cache.domain.types import MAX_MAX_AGE, PolicyId


class Mode(Enum):
    NONE = "none"
    TESTING = "testing"
    ENFORCE = "enforce"


class RecordSource(Enum):
    """Provenance of a cache record."""
    DNS = "dns"          # fetched from the policy host under a DNS marker id
    PRELOAD = "preload"  # synthesised from a preload list entry


@dataclass(frozen=True, slots=True)
class Policy:
    """An MTA-STS policy.

    max_age is non-negative for every policy parsed from a policy
    document. Policies synthesised from a preload list may carry a
    non-positive value once the list is past its expiry; consumers
    must reject those before trusting them.
    """
    mode: Mode
    max_age: int
    mx: tuple[str, ...] = field(default_factory=tuple)

    def match(self, host: str) -> bool:
        """Check if an MX hostname matches any of this policy's patterns.

        Matching rules:
          - "mail.example.com" matches only "mail.example.com"
          - "*.example.com" matches "mx1.example.com" but neither
            "example.com" nor "a.b.example.com"

        Both sides are canonicalised with for_lookup() first.
        """
        host, _ = for_lookup(host)
        host_parts = host.split(".")
        for pattern in self.mx:
            if pattern.startswith("*."):
                # "*" is not a valid IDNA label; canonicalise the suffix only.
                pattern = "*." + for_lookup(pattern[2:])[0]
            else:
                pattern, _ = for_lookup(pattern)
            pattern_parts = pattern.split(".")
            if len(pattern_parts) != len(host_parts):
                continue
            if pattern_parts[0] == "*":
                if pattern_parts[1:] == host_parts[1:] and host_parts[0]:
                    return True
            elif pattern_parts == host_parts:
                return True
        return False

    def to_json(self) -> dict[str, Any]:
        return {"Mode": self.mode.value, "MaxAge": self.max_age, "MX": list(self.mx)}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Policy:
        """Inverse of to_json(). Raises KeyError/ValueError on bad input."""
        return cls(
            mode=Mode(data["Mode"]),
            max_age=int(data["MaxAge"]),
            mx=tuple(data.get("MX") or ()),
        )


@dataclass(frozen=True, slots=True)
class CacheRecord:
    """What a PolicyStore holds for one domain."""
    id: PolicyId
    fetch_time: datetime
    policy: Policy
    source: RecordSource = RecordSource.DNS

    @property
    def expires_at(self) -> datetime:
        return self.fetch_time + timedelta(seconds=self.policy.max_age)

    def is_valid(self, now: datetime) -> bool:
        """True while fetch_time + max_age has not passed."""
        return self.expires_at >= now


def parse_policy(text: str) -> Policy:
    """Parse a policy document (RFC 8461 section 3.2).

    The document is a list of "key: value" lines separated by LF or
    CRLF. version, mode and max_age are required; mx is required unless
    mode is "none". Unknown keys are ignored, as the RFC asks.

    Raises PolicySyntaxError on anything malformed.
    """
    version: str | None = None
    mode: Mode | None = None
    max_age: int | None = None
    mx: list[str] = []

    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        key, sep, value = line.partition(":")
        if not sep:
            raise PolicySyntaxError(f"line {lineno}: missing ':' separator")
        key = key.strip()
        value = value.strip()

        if key == "version":
            if version is not None:
                raise PolicySyntaxError("duplicate version field")
            version = value
        elif key == "mode":
            if mode is not None:
                raise PolicySyntaxError("duplicate mode field")
            try:
                mode = Mode(value)
            except ValueError:
                raise PolicySyntaxError(f"unknown mode: {value!r}") from None
        elif key == "max_age":
            if max_age is not None:
                raise PolicySyntaxError("duplicate max_age field")
            if not value.isdigit() or len(value) > 10:
                raise PolicySyntaxError(f"invalid max_age: {value!r}")
            max_age = int(value)
            if max_age > MAX_MAX_AGE:
                raise PolicySyntaxError(f"max_age exceeds {MAX_MAX_AGE}")
        elif key == "mx":
            if not value:
                raise PolicySyntaxError("empty mx field")
            mx.append(value)

    if version != "STSv1":
        raise PolicySyntaxError(f"unsupported or missing version: {version!r}")
    if mode is None:
        raise PolicySyntaxError("missing mode field")
    if max_age is None:
        raise PolicySyntaxError("missing max_age field")
    if not mx and mode is not Mode.NONE:
        raise PolicySyntaxError("missing mx field")

    return Policy(mode=mode, max_age=max_age, mx=tuple(mx))

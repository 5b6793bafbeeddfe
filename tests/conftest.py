"""Shared fixtures: fake resolver/fetcher, a settable clock, a sample list.

The fakes count their invocations so tests can assert that the cache
did (or did not) go to the network.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mtasts_cache.discovery.fetcher import PolicyFetcher
from mtasts_cache.discovery.resolver import DomainResolver
from mtasts_cache.domain.errors import FetchError, ResolutionError
from mtasts_cache.domain.policy import Mode, Policy

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

# From the STARTTLS Everywhere RULES.md example.
SAMPLE_LIST = """{
  "timestamp": "2014-06-06T14:30:16.000000+00:00",
  "author": "Electronic Frontier Foundation https://eff.org",
  "expires": "2014-06-06T15:30:16.000000+00:00",
  "version": "0.1",
  "policy-aliases": {
    "gmail": {
      "mode": "testing",
      "mxs": [".mail.google.com"]
    }
  },
  "policies": {
    "yahoo.com": {
      "mode": "enforce",
      "mxs": [".yahoodns.net"]
    },
    "eff.org": {
      "mode": "enforce",
      "mxs": [".eff.org"]
    },
    "gmail.com": {
      "policy-alias": "gmail"
    },
    "example.com": {
      "mode": "testing",
      "mxs": ["mail.example.com", ".example.net"]
    }
  }
}"""


class FakeResolver(DomainResolver):
    """TXT answers from a dict; names mapped to an exception raise it."""

    def __init__(self, zones: dict[str, list[str] | Exception] | None = None) -> None:
        self.zones = zones or {}
        self.calls: list[str] = []

    def lookup_txt(self, name: str, timeout: float | None = None) -> list[str]:
        self.calls.append(name)
        answer = self.zones.get(name)
        if answer is None:
            raise ResolutionError(f"{name}: NXDOMAIN", permanent=True)
        if isinstance(answer, Exception):
            raise answer
        return list(answer)


class FakeFetcher(PolicyFetcher):
    """Returns canned policies per domain; missing domains fail."""

    def __init__(self, policies: dict[str, Policy | Exception] | None = None) -> None:
        self.policies = policies or {}
        self.calls: list[str] = []
        self.closed = False

    def fetch(self, domain: str, timeout: float | None = None) -> Policy:
        self.calls.append(domain)
        result = self.policies.get(domain)
        if result is None:
            raise FetchError(f"{domain}: connection refused")
        if isinstance(result, Exception):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


class Clock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def enforce_policy() -> Policy:
    return Policy(mode=Mode.ENFORCE, max_age=86400, mx=("*.mail.example.com",))


@pytest.fixture()
def sample_list_text() -> str:
    return SAMPLE_LIST

"""HTTPS retrieval of policy documents.

PolicyFetcher is the seam PolicyCache depends on; HTTPSPolicyFetcher is
the default implementation on top of httpx:

    GET https://mta-sts.<domain>/.well-known/mta-sts.txt

RFC 8461 section 3.3 rules enforced here:
  - redirects are never followed; receiving one is a failure
  - only status 200 is accepted
  - the media type must be exactly text/plain (parameters ignored)

The timeout bounds the whole request, body included. httpx applies its
own timeout to each network operation only, so a host trickling bytes
is cut off by an explicit deadline.
"""
from __future__ import annotations

import logging
import re
import threading
import time
from abc import ABC, abstractmethod
from email.message import Message
from typing import Callable

import httpx

from mtasts_cache.domain.errors import FetchError, PolicySyntaxError
from mtasts_cache.domain.policy import Policy, parse_policy
from mtasts_cache.domain.types import DomainName

log = logging.getLogger(__name__)

DEFAULT_MAX_POLICY_BYTES = 64 * 1024

# RFC 7230 token characters.
_TOKEN_RE = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")


def policy_url(domain: DomainName) -> str:
    return f"https://mta-sts.{domain}/.well-known/mta-sts.txt"


def parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    """Parse a Content-Type header into (type/subtype, params).

    The type is lowercased, parameter values are unquoted. Raises
    ValueError if the type/subtype part is malformed, an empty header
    included.
    """
    msg = Message()
    msg["Content-Type"] = value
    media_type = msg.get_content_type()
    # get_content_type() silently substitutes text/plain for garbage.
    main, _, sub = value.partition(";")[0].strip().lower().partition("/")
    if (
        not _TOKEN_RE.fullmatch(main)
        or not _TOKEN_RE.fullmatch(sub)
        or media_type != f"{main}/{sub}"
    ):
        raise ValueError(f"invalid media type: {value!r}")
    params = {name.lower(): str(v) for name, v in (msg.get_params() or [])[1:]}
    return media_type, params


class PolicyFetcher(ABC):
    """Retrieve and parse a domain's policy document."""

    @abstractmethod
    def fetch(self, domain: DomainName, timeout: float | None = None) -> Policy:
        """Return the published policy.

        Raises FetchError (PolicySyntaxError included) for any failure.
        """
        ...

    def close(self) -> None:
        """Release network resources. The default holds none."""


class HTTPSPolicyFetcher(PolicyFetcher):
    """Fetch policies over HTTPS with httpx.

    Args:
        client: httpx.Client to use. Created lazily when omitted; such a
            client is owned and closed by close().
        timeout: Request timeout when the caller passes none.
        max_bytes: Largest policy body accepted.
        clock: Monotonic time source for the request deadline. Injected
            by tests.

    Safe for concurrent fetch() calls; they share one connection pool.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
        max_bytes: int = DEFAULT_MAX_POLICY_BYTES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._client_lock = threading.Lock()
        self._owns_client = client is None
        self._timeout = timeout
        self._max_bytes = max_bytes
        self._clock = clock

    def _get_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(
                    follow_redirects=False,
                    timeout=httpx.Timeout(self._timeout),
                )
            return self._client

    def close(self) -> None:
        with self._client_lock:
            if self._owns_client and self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> HTTPSPolicyFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch(self, domain: DomainName, timeout: float | None = None) -> Policy:
        url = policy_url(domain)
        request_timeout = self._timeout if timeout is None else timeout
        deadline = self._clock() + request_timeout
        try:
            with self._get_client().stream(
                "GET", url, follow_redirects=False, timeout=request_timeout
            ) as resp:
                body = self._read_body(resp, deadline)
        except (httpx.HTTPError, httpx.InvalidURL) as err:
            raise FetchError(f"{url}: {err}") from err

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as err:
            raise PolicySyntaxError(f"{url}: policy is not valid UTF-8") from err
        policy = parse_policy(text)
        log.debug("Fetched policy for %s: mode=%s max_age=%d", domain,
                  policy.mode.value, policy.max_age)
        return policy

    def _check_deadline(self, resp: httpx.Response, deadline: float) -> None:
        if self._clock() > deadline:
            raise FetchError(f"{resp.url}: request timed out")

    def _read_body(self, resp: httpx.Response, deadline: float) -> bytes:
        self._check_deadline(resp, deadline)
        if 300 <= resp.status_code < 400:
            raise FetchError(f"{resp.url}: HTTP redirects are forbidden")
        if resp.status_code != 200:
            raise FetchError(f"{resp.url}: HTTP {resp.status_code}")

        try:
            media_type, _ = parse_media_type(resp.headers.get("Content-Type", ""))
        except ValueError as err:
            raise FetchError(f"{resp.url}: {err}") from err
        if media_type != "text/plain":
            raise FetchError(f"{resp.url}: unexpected content type {media_type}")

        chunks: list[bytes] = []
        size = 0
        for chunk in resp.iter_bytes():
            self._check_deadline(resp, deadline)
            size += len(chunk)
            if size > self._max_bytes:
                raise FetchError(f"{resp.url}: policy exceeds {self._max_bytes} bytes")
            chunks.append(chunk)
        return b"".join(chunks)

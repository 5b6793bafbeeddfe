"""HTTPSPolicyFetcher against an httpx.MockTransport."""
from __future__ import annotations

import threading
import time

import httpx
import pytest

from mtasts_cache.discovery.fetcher import (
    HTTPSPolicyFetcher,
    parse_media_type,
    policy_url,
)
from mtasts_cache.domain.errors import FetchError, PolicySyntaxError
from mtasts_cache.domain.policy import Mode

POLICY_TEXT = b"version: STSv1\nmode: enforce\nmx: *.mail.example.com\nmax_age: 86400\n"


def make_fetcher(handler, **kwargs) -> tuple[HTTPSPolicyFetcher, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(record))
    return HTTPSPolicyFetcher(client=client, **kwargs), seen


def text_response(body: bytes = POLICY_TEXT, status: int = 200,
                  content_type: str = "text/plain; charset=utf-8") -> httpx.Response:
    return httpx.Response(status, headers={"Content-Type": content_type}, content=body)


def test_policy_url():
    assert policy_url("example.com") == "https://mta-sts.example.com/.well-known/mta-sts.txt"


def test_fetches_and_parses():
    fetcher, seen = make_fetcher(lambda req: text_response())
    policy = fetcher.fetch("example.com")
    assert policy.mode is Mode.ENFORCE
    assert policy.mx == ("*.mail.example.com",)
    assert str(seen[0].url) == "https://mta-sts.example.com/.well-known/mta-sts.txt"


@pytest.mark.parametrize("status", [301, 302, 307, 308])
def test_redirects_are_failures(status):
    fetcher, seen = make_fetcher(lambda req: httpx.Response(
        status, headers={"Location": "https://elsewhere.example/policy.txt"}
    ))
    with pytest.raises(FetchError, match="redirect"):
        fetcher.fetch("example.com")
    assert len(seen) == 1


@pytest.mark.parametrize("status", [204, 404, 500])
def test_non_200_is_a_failure(status):
    fetcher, _ = make_fetcher(lambda req: text_response(status=status))
    with pytest.raises(FetchError):
        fetcher.fetch("example.com")


@pytest.mark.parametrize("content_type", ["text/html", "application/octet-stream", "", "text"])
def test_wrong_media_type(content_type):
    fetcher, _ = make_fetcher(lambda req: text_response(content_type=content_type))
    with pytest.raises(FetchError):
        fetcher.fetch("example.com")


def test_media_type_is_case_insensitive():
    fetcher, _ = make_fetcher(lambda req: text_response(content_type="Text/Plain"))
    assert fetcher.fetch("example.com").max_age == 86400


def test_oversized_body():
    fetcher, _ = make_fetcher(lambda req: text_response(body=POLICY_TEXT * 100), max_bytes=1024)
    with pytest.raises(FetchError, match="exceeds"):
        fetcher.fetch("example.com")


def test_invalid_utf8():
    fetcher, _ = make_fetcher(lambda req: text_response(body=POLICY_TEXT + b"\xff\xfe"))
    with pytest.raises(PolicySyntaxError):
        fetcher.fetch("example.com")


def test_bad_policy_text():
    fetcher, _ = make_fetcher(lambda req: text_response(body=b"<html></html>"))
    with pytest.raises(PolicySyntaxError):
        fetcher.fetch("example.com")


def test_transport_errors_become_fetch_errors():
    def fail(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    fetcher, _ = make_fetcher(fail)
    with pytest.raises(FetchError) as info:
        fetcher.fetch("example.com")
    assert isinstance(info.value.__cause__, httpx.ConnectTimeout)


def test_slow_body_is_cut_off_at_the_deadline():
    def trickle():
        for byte in POLICY_TEXT:
            time.sleep(0.1)
            yield bytes([byte])

    fetcher, _ = make_fetcher(lambda req: httpx.Response(
        200, headers={"Content-Type": "text/plain"}, content=trickle(),
    ))
    started = time.monotonic()
    with pytest.raises(FetchError, match="timed out"):
        fetcher.fetch("example.com", timeout=0.5)
    assert time.monotonic() - started < 1.5


class SteppedClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_headers_arriving_after_the_deadline():
    clock = SteppedClock()

    def slow_headers(request):
        clock.now += 61
        return text_response()

    fetcher, _ = make_fetcher(slow_headers, clock=clock)
    with pytest.raises(FetchError, match="timed out"):
        fetcher.fetch("example.com")


def test_deadline_uses_call_timeout():
    clock = SteppedClock()

    def slow_headers(request):
        clock.now += 5
        return text_response()

    fetcher, _ = make_fetcher(slow_headers, clock=clock)
    assert fetcher.fetch("example.com").mode is Mode.ENFORCE
    with pytest.raises(FetchError):
        fetcher.fetch("example.com", timeout=2.0)


def test_concurrent_first_fetches_share_one_client(monkeypatch):
    created: list[httpx.Client] = []
    real_client = httpx.Client
    transport = httpx.MockTransport(lambda req: text_response())

    def counting_client(**kwargs):
        time.sleep(0.05)  # widen the window between check and assignment
        client = real_client(transport=transport, **kwargs)
        created.append(client)
        return client

    monkeypatch.setattr(httpx, "Client", counting_client)
    fetcher = HTTPSPolicyFetcher()
    start = threading.Barrier(8)

    def worker():
        start.wait(timeout=5.0)
        fetcher.fetch("example.com")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10.0)

    assert len(created) == 1
    fetcher.close()
    assert created[0].is_closed


def test_close_leaves_injected_client_open():
    fetcher, _ = make_fetcher(lambda req: text_response())
    with fetcher:
        fetcher.fetch("example.com")
    # The client was supplied by the caller, so it is still usable.
    assert fetcher.fetch("example.com").mode is Mode.ENFORCE


class TestParseMediaType:

    @pytest.mark.parametrize("value, expected", [
        ("text/plain", ("text/plain", {})),
        ("TEXT/Plain ; Charset=UTF-8", ("text/plain", {"charset": "UTF-8"})),
        ('text/plain; charset="utf-8"; format=flowed',
         ("text/plain", {"charset": "utf-8", "format": "flowed"})),
        ('text/plain; name="a\\"b"', ("text/plain", {"name": 'a"b'})),
    ])
    def test_valid(self, value, expected):
        assert parse_media_type(value) == expected

    @pytest.mark.parametrize("value", [
        "",
        "text",
        "text/",
        "/plain",
        "text /plain",
        "text/plain/extra",
        "; charset=utf-8",
    ])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_media_type(value)

"""Download and verify a preload list over HTTPS.

    list = download(STARTTLS_EVERYWHERE, verifier=my_pgp_verifier)
    store.update(list)

or, in one step, refresh_preload(store, source, verifier=...).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from mtasts_cache.discovery.fetcher import parse_media_type
from mtasts_cache.domain.errors import PreloadDownloadError, SignatureError
from mtasts_cache.preload.preload_list import PreloadList, load_list
from mtasts_cache.preload.signature import SignatureVerifier
from mtasts_cache.preload.store import PreloadBackedStore

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Source:
    """Where to get a list and how to check it.

    sig_uri may be None to skip signature checks. sig_key is the
    ASCII-armored OpenPGP key the signature is checked against when
    download() is not handed a verifier of its own.
    """
    list_uri: str
    sig_uri: str | None = None
    sig_key: str | None = None


def _get(client: httpx.Client, uri: str, timeout: float) -> httpx.Response:
    try:
        resp = client.get(uri, timeout=timeout)
    except (httpx.HTTPError, httpx.InvalidURL) as err:
        raise PreloadDownloadError(f"{uri}: {err}") from err
    if resp.status_code != 200:
        raise PreloadDownloadError(f"{uri}: unexpected HTTP status {resp.status_code}")
    return resp


def _default_verifier(source: Source) -> SignatureVerifier:
    if not source.sig_key:
        raise SignatureError(
            f"{source.sig_uri}: no signature verifier or key configured"
        )
    # Deferred so that pgpy is only loaded for PGP-signed sources.
    from mtasts_cache.preload.pgp import PGPVerifier

    return PGPVerifier(source.sig_key)


def download(
    source: Source,
    client: httpx.Client | None = None,
    verifier: SignatureVerifier | None = None,
    timeout: float = 60.0,
) -> PreloadList:
    """Fetch, verify and parse a preload list.

    The list must be served as application/json with status 200. If the
    source has a sig_uri, the detached signature is checked before the
    list is parsed, with verifier or else a PGPVerifier for sig_key.

    Raises PreloadDownloadError, SignatureError or PreloadFormatError.
    """
    own_client = client is None
    if client is None:
        client = httpx.Client(follow_redirects=True)
    try:
        resp = _get(client, source.list_uri, timeout)
        try:
            media_type, _ = parse_media_type(resp.headers.get("Content-Type", ""))
        except ValueError as err:
            raise PreloadDownloadError(f"{source.list_uri}: {err}") from err
        if media_type != "application/json":
            raise PreloadDownloadError(
                f"{source.list_uri}: unexpected Content-Type {media_type}"
            )
        blob = resp.content

        if source.sig_uri:
            if verifier is None:
                verifier = _default_verifier(source)
            try:
                sig = _get(client, source.sig_uri, timeout).content
            except PreloadDownloadError as err:
                raise SignatureError(str(err)) from err
            verifier.verify(blob, sig)
    finally:
        if own_client:
            client.close()

    plist = load_list(blob)
    log.debug("Downloaded preload list %s (version %s, expires %s)",
              source.list_uri, plist.version, plist.expires.isoformat())
    return plist


def refresh_preload(
    store: PreloadBackedStore,
    source: Source,
    client: httpx.Client | None = None,
    verifier: SignatureVerifier | None = None,
    timeout: float = 60.0,
) -> PreloadList:
    """Download a list and install it into store.

    Raises DowngradeRejected if the store refuses the new list.
    """
    plist = download(source, client=client, verifier=verifier, timeout=timeout)
    store.update(plist)
    return plist

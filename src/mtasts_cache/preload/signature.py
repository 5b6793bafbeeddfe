"""Detached-signature verification for downloaded preload lists.

SignatureVerifier is the seam download() depends on. The EFF list is
signed with OpenPGP, see pgp.PGPVerifier. Ed25519Verifier covers
self-hosted lists signed with a raw Ed25519 key.
"""
from __future__ import annotations

import base64
import binascii
from abc import ABC, abstractmethod

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from mtasts_cache.domain.errors import SignatureError


class SignatureVerifier(ABC):

    @abstractmethod
    def verify(self, blob: bytes, signature: bytes) -> None:
        """Raise SignatureError unless signature is valid for blob."""
        ...


class Ed25519Verifier(SignatureVerifier):
    """Verify Ed25519 (RFC 8032) signatures.

    Args:
        public_key: 32-byte raw Ed25519 public key.

    The signature may be the raw 64 bytes or their base64 text form.
    """

    def __init__(self, public_key: bytes) -> None:
        if len(public_key) != 32:
            raise ValueError(
                f"Ed25519 public key must be 32 bytes, got {len(public_key)}"
            )
        self._key = ed25519.Ed25519PublicKey.from_public_bytes(public_key)

    def verify(self, blob: bytes, signature: bytes) -> None:
        if len(signature) != 64:
            try:
                signature = base64.b64decode(signature.strip(), validate=True)
            except (binascii.Error, ValueError) as err:
                raise SignatureError(f"signature is not valid base64: {err}") from err
        if len(signature) != 64:
            raise SignatureError(f"signature must be 64 bytes, got {len(signature)}")
        try:
            self._key.verify(signature, blob)
        except InvalidSignature as err:
            raise SignatureError("signature does not match preload list") from err

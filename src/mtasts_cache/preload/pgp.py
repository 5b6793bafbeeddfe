"""OpenPGP detached-signature verification, for the EFF STARTTLS
Everywhere list and any other source publishing an armored key.

Kept apart from signature.py so that pgpy is only imported by callers
that actually verify PGP signatures.
"""
from __future__ import annotations

import pgpy
from pgpy.errors import PGPError

from mtasts_cache.domain.errors import SignatureError
from mtasts_cache.preload.signature import SignatureVerifier


class PGPVerifier(SignatureVerifier):
    """Check detached signatures against an OpenPGP public key.

    Args:
        armored_key: ASCII-armored public key block. Signatures made by
            the primary key or any of its subkeys are accepted.

    Raises SignatureError from the constructor if the key does not
    parse.
    """

    def __init__(self, armored_key: str) -> None:
        try:
            self._key, _ = pgpy.PGPKey.from_blob(armored_key)
        except (PGPError, ValueError, NotImplementedError) as err:
            raise SignatureError(f"cannot read PGP key: {err}") from err

    @property
    def fingerprint(self) -> str:
        return str(self._key.fingerprint)

    def verify(self, blob: bytes, signature: bytes) -> None:
        try:
            sig = pgpy.PGPSignature.from_blob(signature)
            result = self._key.verify(blob, sig)
        except (PGPError, ValueError, NotImplementedError) as err:
            raise SignatureError(f"PGP signature check failed: {err}") from err
        if not result:
            raise SignatureError("PGP signature does not match preload list")

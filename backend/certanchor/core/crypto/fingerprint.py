"""
Certificate fingerprint derivation.

A fingerprint is the Keccak-256 digest of a certificate record's canonical
serialization, the digest format the CertificateRegistry contract stores.
It is 32 bytes wide so it fits the contract's ``bytes32`` slot, and it is
exchanged as ``0x``-prefixed lowercase hex. SHA-256 can be selected for
deployments whose registry expects it.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from dataclasses import dataclass

from Crypto.Hash import keccak

from certanchor.core.certificate import CertificateRecord
from certanchor.core.crypto.canonicalization import (
    CANONICALIZATION_ORDERED_JSON_V1,
    canonicalize,
)

FINGERPRINT_LENGTH = 32

HASH_KECCAK256 = "keccak-256"
HASH_SHA256 = "sha-256"

SUPPORTED_HASH_ALGORITHMS = (HASH_KECCAK256, HASH_SHA256)

_HEX_DIGEST = re.compile(r"(?:0[xX])?([0-9a-fA-F]{64})")


@dataclass(frozen=True)
class Fingerprint:
    """A fixed-length certificate digest.

    Equality is exact byte equality. Hex input is accepted in either letter
    case; hex output is always lowercase.
    """

    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.digest, bytes) or len(self.digest) != FINGERPRINT_LENGTH:
            raise ValueError(f"Fingerprint must be exactly {FINGERPRINT_LENGTH} bytes")

    @classmethod
    def from_hex(cls, value: str) -> Fingerprint:
        """Parse a 64-digit hex digest, with or without the ``0x`` prefix."""
        match = _HEX_DIGEST.fullmatch(value.strip()) if isinstance(value, str) else None
        if match is None:
            raise ValueError(f"Not a 32-byte hex digest: {value!r}")
        return cls(bytes.fromhex(match.group(1)))

    @property
    def hex(self) -> str:
        """``0x``-prefixed lowercase hex, 66 characters."""
        return "0x" + self.digest.hex()

    @property
    def is_empty(self) -> bool:
        """True for the all-zero sentinel the ledger returns for unknown keys."""
        return self.digest == bytes(FINGERPRINT_LENGTH)

    def matches(self, other: Fingerprint) -> bool:
        """Compare digests in constant time."""
        return hmac.compare_digest(self.digest, other.digest)

    def __str__(self) -> str:
        return self.hex


# All-zero digest. An anchored record could in principle hash to this value;
# that collision is accepted.
EMPTY_FINGERPRINT = Fingerprint(bytes(FINGERPRINT_LENGTH))


def digest_bytes(payload: bytes, *, algorithm: str = HASH_KECCAK256) -> bytes:
    """Hash ``payload`` with the selected 32-byte digest algorithm."""
    if algorithm == HASH_KECCAK256:
        return keccak.new(digest_bits=256, data=payload).digest()
    if algorithm == HASH_SHA256:
        return hashlib.sha256(payload).digest()
    raise ValueError(
        f"Unsupported hash algorithm: {algorithm} "
        f"(expected one of {', '.join(SUPPORTED_HASH_ALGORITHMS)})"
    )


def derive_fingerprint(
    record: CertificateRecord,
    *,
    canonicalization: str = CANONICALIZATION_ORDERED_JSON_V1,
    algorithm: str = HASH_KECCAK256,
) -> Fingerprint:
    """Derive the fingerprint of a certificate record.

    Parameters
    ----------
    record:
        The validated certificate record.
    canonicalization:
        Serialization mode; ``ordered-json-v1`` (default) or ``rfc8785``.
    algorithm:
        Digest algorithm; ``keccak-256`` (default) or ``sha-256``.

    Returns
    -------
    Fingerprint
        Digest of the canonical UTF-8 bytes.
    """
    payload = canonicalize(record.canonical_payload(), canonicalization=canonicalization)
    return Fingerprint(digest_bytes(payload, algorithm=algorithm))


def fingerprints_match(left: str, right: str) -> bool:
    """Compare two hex-encoded fingerprints.

    Letter case and the ``0x`` prefix are encoding details and are ignored;
    the digest bytes must be identical. Malformed input never matches.
    """
    try:
        return Fingerprint.from_hex(left).matches(Fingerprint.from_hex(right))
    except ValueError:
        return False

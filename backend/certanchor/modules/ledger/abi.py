"""
Solidity ABI encoding for the CertificateRegistry contract.

The calls this service makes::

    function storeCertificate(string certificateNumber, bytes32 certificateHash) returns (bool)
    function verifyCertificate(string certificateNumber) view returns (bytes32, uint256, address)
    function getCertificateHash(string certificateNumber) view returns (bytes32)

Selectors are the first four bytes of the Keccak-256 hash of each signature.
"""

from __future__ import annotations

from dataclasses import dataclass

WORD_SIZE = 32

STORE_CERTIFICATE_SELECTOR = bytes.fromhex("7b182e42")
VERIFY_CERTIFICATE_SELECTOR = bytes.fromhex("8b23d875")
GET_CERTIFICATE_HASH_SELECTOR = bytes.fromhex("0499ba6f")


@dataclass(frozen=True)
class VerifyCertificateResult:
    """Decoded return values of ``verifyCertificate``."""

    certificate_hash: bytes
    timestamp: int
    issuer: str


def _uint_word(value: int) -> bytes:
    if value < 0:
        raise ValueError("uint values must be non-negative")
    return value.to_bytes(WORD_SIZE, "big")


def _pad_right(data: bytes) -> bytes:
    remainder = len(data) % WORD_SIZE
    if remainder == 0:
        return data
    return data + bytes(WORD_SIZE - remainder)


def _encode_string_tail(value: str) -> bytes:
    raw = value.encode("utf-8")
    return _uint_word(len(raw)) + _pad_right(raw)


def encode_store_certificate(certificate_number: str, certificate_hash: bytes) -> str:
    """Build call data for ``storeCertificate(string,bytes32)``."""
    if len(certificate_hash) != WORD_SIZE:
        raise ValueError("certificate_hash must be 32 bytes")
    # Head: offset of the dynamic string (two head slots), then the static bytes32.
    head = _uint_word(2 * WORD_SIZE) + certificate_hash
    data = STORE_CERTIFICATE_SELECTOR + head + _encode_string_tail(certificate_number)
    return "0x" + data.hex()


def encode_verify_certificate(certificate_number: str) -> str:
    """Build call data for ``verifyCertificate(string)``."""
    data = VERIFY_CERTIFICATE_SELECTOR + _uint_word(WORD_SIZE)
    data += _encode_string_tail(certificate_number)
    return "0x" + data.hex()


def decode_verify_certificate(result: str) -> VerifyCertificateResult:
    """Decode the ``(bytes32, uint256, address)`` tuple returned by ``eth_call``."""
    raw = bytes.fromhex(result[2:] if result.startswith(("0x", "0X")) else result)
    if len(raw) < 3 * WORD_SIZE:
        raise ValueError(
            f"verifyCertificate returned {len(raw)} bytes, expected {3 * WORD_SIZE}"
        )
    words = [raw[i * WORD_SIZE : (i + 1) * WORD_SIZE] for i in range(3)]
    return VerifyCertificateResult(
        certificate_hash=words[0],
        timestamp=int.from_bytes(words[1], "big"),
        issuer="0x" + words[2][-20:].hex(),
    )


def encode_get_certificate_hash(certificate_number: str) -> str:
    """Build call data for ``getCertificateHash(string)``."""
    data = GET_CERTIFICATE_HASH_SELECTOR + _uint_word(WORD_SIZE)
    data += _encode_string_tail(certificate_number)
    return "0x" + data.hex()


def decode_certificate_hash(result: str) -> bytes:
    """Decode the single ``bytes32`` returned by ``getCertificateHash``."""
    raw = bytes.fromhex(result[2:] if result.startswith(("0x", "0X")) else result)
    if len(raw) < WORD_SIZE:
        raise ValueError(f"getCertificateHash returned {len(raw)} bytes, expected {WORD_SIZE}")
    return raw[:WORD_SIZE]

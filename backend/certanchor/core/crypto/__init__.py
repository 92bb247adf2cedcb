"""
Certificate fingerprint primitives.

Pure library modules with no network or framework dependencies:
- **canonicalization**: deterministic byte serialization of records
- **fingerprint**: Keccak-256 (or SHA-256) derivation, hex encoding and comparison
"""

from certanchor.core.crypto.canonicalization import (
    CANONICALIZATION_ORDERED_JSON_V1,
    CANONICALIZATION_RFC8785,
    SUPPORTED_CANONICALIZATIONS,
    canonicalize,
    canonicalize_jcs_bytes,
    canonicalize_ordered_json_bytes,
)
from certanchor.core.crypto.fingerprint import (
    EMPTY_FINGERPRINT,
    FINGERPRINT_LENGTH,
    HASH_KECCAK256,
    HASH_SHA256,
    SUPPORTED_HASH_ALGORITHMS,
    Fingerprint,
    derive_fingerprint,
    digest_bytes,
    fingerprints_match,
)

__all__ = [
    "canonicalize",
    "canonicalize_jcs_bytes",
    "canonicalize_ordered_json_bytes",
    "CANONICALIZATION_ORDERED_JSON_V1",
    "CANONICALIZATION_RFC8785",
    "SUPPORTED_CANONICALIZATIONS",
    "EMPTY_FINGERPRINT",
    "FINGERPRINT_LENGTH",
    "HASH_KECCAK256",
    "HASH_SHA256",
    "SUPPORTED_HASH_ALGORITHMS",
    "Fingerprint",
    "derive_fingerprint",
    "digest_bytes",
    "fingerprints_match",
]

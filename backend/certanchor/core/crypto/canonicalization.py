"""Canonicalization helpers for stable cross-platform hashing."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import rfc8785

CANONICALIZATION_ORDERED_JSON_V1 = "ordered-json-v1"
CANONICALIZATION_RFC8785 = "rfc8785"

SUPPORTED_CANONICALIZATIONS = (CANONICALIZATION_ORDERED_JSON_V1, CANONICALIZATION_RFC8785)


def canonicalize_ordered_json_bytes(data: Mapping[str, Any]) -> bytes:
    """Return compact JSON bytes that keep the mapping's key order.

    The output is byte-identical to JavaScript ``JSON.stringify`` for the
    same object: no whitespace, non-ASCII characters left as UTF-8.
    The caller is responsible for fixing the key order.
    """
    return json.dumps(
        dict(data),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def canonicalize_jcs_bytes(data: Any) -> bytes:
    """Return RFC 8785 (JCS) canonical bytes."""
    canonical = rfc8785.dumps(data)
    if isinstance(canonical, bytes):
        return canonical
    return str(canonical).encode("utf-8")


def canonicalize(data: Mapping[str, Any], *, canonicalization: str) -> bytes:
    """Serialize ``data`` with the selected canonicalization mode."""
    if canonicalization == CANONICALIZATION_ORDERED_JSON_V1:
        return canonicalize_ordered_json_bytes(data)
    if canonicalization == CANONICALIZATION_RFC8785:
        return canonicalize_jcs_bytes(dict(data))
    raise ValueError(
        f"Unsupported canonicalization mode: {canonicalization} "
        f"(expected one of {', '.join(SUPPORTED_CANONICALIZATIONS)})"
    )

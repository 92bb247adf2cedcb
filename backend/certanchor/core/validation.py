"""Input validation shared by the anchoring and verification coordinators."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from certanchor.core.certificate import CertificateRecord
from certanchor.core.errors import InvalidInputError


def validate_key(key: Any) -> str:
    """Return ``key`` if it is a usable ledger key, else raise ``InvalidInputError``."""
    if not isinstance(key, str) or not key.strip():
        raise InvalidInputError("certificate number is required")
    return key


def coerce_record(record: CertificateRecord | Mapping[str, Any] | None) -> CertificateRecord:
    """Accept a ``CertificateRecord`` or a mapping that validates into one."""
    if isinstance(record, CertificateRecord):
        return record
    if not isinstance(record, Mapping) or not record:
        raise InvalidInputError("certificate data is required")
    try:
        return CertificateRecord.model_validate(dict(record))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidInputError(f"invalid certificate data: {problems}") from exc

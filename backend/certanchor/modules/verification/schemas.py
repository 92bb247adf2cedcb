"""Pydantic schemas for certificate verification endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from certanchor.modules.verification.service import VerificationVerdict


class VerifyExistenceResponse(BaseModel):
    """Whether a certificate number is anchored, and what the ledger holds."""

    certificate_number: str = Field(alias="certificateNumber")
    verified: bool = Field(description="True if the ledger holds a fingerprint for the key")
    fingerprint: str | None = None
    timestamp: int | None = Field(default=None, description="Anchoring time, Unix seconds")
    issuer: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class VerifyMatchResponse(BaseModel):
    """Comparison of a supplied certificate with its anchored fingerprint."""

    certificate_number: str = Field(alias="certificateNumber")
    verified: bool
    hash_match: bool = Field(alias="hashMatch")
    verdict: VerificationVerdict
    local_fingerprint: str = Field(alias="localFingerprint")
    ledger_fingerprint: str | None = Field(default=None, alias="ledgerFingerprint")
    timestamp: int | None = None
    issuer: str | None = None

    model_config = ConfigDict(populate_by_name=True)

"""Pydantic schemas for the certificate store endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from certanchor.core.certificate import CertificateRecord


class CertificateRequest(BaseModel):
    """A certificate number plus the certificate content to fingerprint."""

    certificate_number: str = Field(alias="certificateNumber", min_length=1)
    certificate_data: CertificateRecord = Field(alias="certificateData")

    model_config = ConfigDict(populate_by_name=True)


class StoreCertificateResponse(BaseModel):
    """Receipt for an anchored certificate fingerprint."""

    certificate_number: str = Field(alias="certificateNumber")
    fingerprint: str = Field(description="0x-prefixed lowercase Keccak-256 digest (66 chars)")
    transaction_reference: str = Field(alias="transactionReference")
    block_number: int | None = Field(default=None, alias="blockNumber")

    model_config = ConfigDict(populate_by_name=True)

"""Certificate record value object.

The record is the semantic payload whose fingerprint is anchored. It is
never persisted by this service; it only feeds the fingerprint deriver.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")

# Order matters: it is the canonical serialization order.
CANONICAL_FIELDS: tuple[str, ...] = (
    "certificateNumber",
    "recipientName",
    "certificateType",
    "issueDate",
    "issuingEntityId",
)


class CertificateRecord(BaseModel):
    """Immutable certificate content used to derive a fingerprint."""

    certificate_number: str = Field(alias="certificateNumber", min_length=1)
    recipient_name: str = Field(alias="recipientName", min_length=1)
    certificate_type: str = Field(alias="certificateType", min_length=1)
    issue_date: str = Field(alias="issueDate", description="Calendar date, YYYY-MM-DD")
    issuing_entity_id: int = Field(alias="issuingEntityId", ge=0, strict=True)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("certificate_number", "recipient_name", "certificate_type")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("issue_date", mode="before")
    @classmethod
    def _validate_issue_date(cls, value: Any) -> Any:
        # The exact input string is hashed, so only the shape is checked here.
        if isinstance(value, datetime):
            raise ValueError("issueDate must not carry a time component")
        if isinstance(value, date):
            return value.isoformat()
        if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
            raise ValueError("issueDate must be a YYYY-MM-DD calendar date")
        try:
            date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"issueDate is not a valid calendar date: {value}") from exc
        return value

    def canonical_payload(self) -> dict[str, Any]:
        """Return the record as a dict in canonical field order."""
        dumped = self.model_dump(by_alias=True)
        return {name: dumped[name] for name in CANONICAL_FIELDS}

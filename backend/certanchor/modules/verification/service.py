"""
Certificate verification against the ledger.

Reconciles three fingerprints: the one recomputed from a supplied record,
the one the ledger holds, and (implicitly) the one anchored earlier. A key
the ledger does not know is a normal ``not-anchored`` verdict; only a failed
ledger call is an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from certanchor.core.certificate import CertificateRecord
from certanchor.core.crypto.canonicalization import CANONICALIZATION_ORDERED_JSON_V1
from certanchor.core.crypto.fingerprint import HASH_KECCAK256, Fingerprint, derive_fingerprint
from certanchor.core.errors import QueryFailedError
from certanchor.core.logging import get_logger
from certanchor.core.validation import coerce_record, validate_key
from certanchor.modules.ledger.base import LedgerClient, LedgerError, LedgerRecord

logger = get_logger(__name__)


class VerificationVerdict(str, Enum):
    """Outcome of comparing a certificate with its ledger record."""

    NOT_ANCHORED = "not-anchored"
    ANCHORED_AND_MATCHES = "anchored-and-matches"
    ANCHORED_BUT_MISMATCH = "anchored-but-mismatch"


@dataclass(frozen=True)
class VerificationResult:
    """Result of a verification request.

    Attributes
    ----------
    key:
        The certificate number looked up.
    ledger_record:
        What the ledger returned (the empty sentinel when not anchored).
    local_fingerprint:
        Fingerprint recomputed from the supplied record, or ``None`` for an
        existence-only check.
    hash_match:
        ``None`` when no record was supplied or the key is not anchored.
    """

    key: str
    ledger_record: LedgerRecord
    local_fingerprint: Fingerprint | None = None
    hash_match: bool | None = None

    @property
    def anchored(self) -> bool:
        return self.ledger_record.exists

    @property
    def verdict(self) -> VerificationVerdict | None:
        """Three-valued verdict; ``None`` if anchored but no record was compared."""
        if not self.anchored:
            return VerificationVerdict.NOT_ANCHORED
        if self.hash_match is None:
            return None
        if self.hash_match:
            return VerificationVerdict.ANCHORED_AND_MATCHES
        return VerificationVerdict.ANCHORED_BUT_MISMATCH


class VerificationService:
    """Read-side checks of anchored certificate fingerprints."""

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        canonicalization: str = CANONICALIZATION_ORDERED_JSON_V1,
        algorithm: str = HASH_KECCAK256,
    ) -> None:
        self._ledger = ledger
        self._canonicalization = canonicalization
        self._algorithm = algorithm

    async def _query(self, key: str) -> LedgerRecord:
        try:
            return await self._ledger.query(key)
        except LedgerError as exc:
            logger.warning(
                "ledger_query_failed",
                key=key,
                error=exc.message,
                error_type=type(exc).__name__,
                retryable=exc.retryable,
            )
            raise QueryFailedError(key=key, cause=exc) from exc

    async def verify_exists(self, key: str) -> VerificationResult:
        """Report whether ``key`` is anchored and what the ledger holds for it."""
        key = validate_key(key)
        record = await self._query(key)

        logger.info(
            "certificate_existence_checked",
            key=key,
            anchored=record.exists,
        )
        return VerificationResult(key=key, ledger_record=record)

    async def verify_matches(
        self,
        key: str,
        record: CertificateRecord | Mapping[str, Any],
    ) -> VerificationResult:
        """Recompute ``record``'s fingerprint and compare it with the ledger's."""
        key = validate_key(key)
        certificate = coerce_record(record)
        local = derive_fingerprint(
            certificate,
            canonicalization=self._canonicalization,
            algorithm=self._algorithm,
        )
        ledger_record = await self._query(key)

        if not ledger_record.exists:
            logger.info("certificate_not_anchored", key=key)
            return VerificationResult(
                key=key,
                ledger_record=ledger_record,
                local_fingerprint=local,
            )

        hash_match = local.matches(ledger_record.fingerprint)
        if hash_match:
            logger.info("certificate_fingerprint_matched", key=key)
        else:
            logger.warning(
                "certificate_fingerprint_mismatch",
                key=key,
                local_fingerprint=local.hex,
                ledger_fingerprint=ledger_record.fingerprint.hex,
            )
        return VerificationResult(
            key=key,
            ledger_record=ledger_record,
            local_fingerprint=local,
            hash_match=hash_match,
        )

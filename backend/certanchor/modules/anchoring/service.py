"""Service layer for anchoring certificate fingerprints to the ledger."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from certanchor.core.certificate import CertificateRecord
from certanchor.core.crypto.canonicalization import CANONICALIZATION_ORDERED_JSON_V1
from certanchor.core.crypto.fingerprint import HASH_KECCAK256, Fingerprint, derive_fingerprint
from certanchor.core.errors import SubmissionFailedError
from certanchor.core.logging import get_logger
from certanchor.core.validation import coerce_record, validate_key
from certanchor.modules.ledger.base import LedgerClient, LedgerError

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnchorReceipt:
    """Proof that a fingerprint was written and confirmed on the ledger."""

    key: str
    fingerprint: Fingerprint
    transaction_reference: str
    block_number: int | None = None


class AnchoringService:
    """Derive a certificate fingerprint and anchor it with a single ledger write.

    No retries happen here: a ledger without rollback makes a silent second
    attempt indistinguishable from a duplicate write.
    """

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

    async def anchor(
        self,
        key: str,
        record: CertificateRecord | Mapping[str, Any],
    ) -> AnchorReceipt:
        """Anchor ``record``'s fingerprint under ``key``.

        Raises
        ------
        InvalidInputError
            The key or record is missing or malformed.
        SubmissionFailedError
            The ledger write failed; ``retryable`` tells whether an outer
            layer may safely try again.
        """
        key = validate_key(key)
        certificate = coerce_record(record)
        fingerprint = derive_fingerprint(
            certificate,
            canonicalization=self._canonicalization,
            algorithm=self._algorithm,
        )

        if certificate.certificate_number != key:
            logger.warning(
                "certificate_key_differs_from_number",
                key=key,
                certificate_number=certificate.certificate_number,
            )

        logger.info("certificate_anchor_started", key=key, fingerprint=fingerprint.hex)
        try:
            confirmation = await self._ledger.submit(key, fingerprint)
        except LedgerError as exc:
            logger.warning(
                "certificate_anchor_failed",
                key=key,
                error=exc.message,
                error_type=type(exc).__name__,
                retryable=exc.retryable,
            )
            raise SubmissionFailedError(key=key, cause=exc) from exc

        logger.info(
            "certificate_anchored",
            key=key,
            fingerprint=fingerprint.hex,
            transaction_reference=confirmation.transaction_reference,
            block_number=confirmation.block_number,
        )
        return AnchorReceipt(
            key=key,
            fingerprint=fingerprint,
            transaction_reference=confirmation.transaction_reference,
            block_number=confirmation.block_number,
        )

"""
API Router for verifying anchored certificates.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from certanchor.core.dependencies import SettingsDep
from certanchor.core.errors import InvalidInputError, QueryFailedError
from certanchor.modules.anchoring.schemas import CertificateRequest
from certanchor.modules.ledger.dependencies import LedgerClientDep, ledger_http_exception
from certanchor.modules.verification.schemas import VerifyExistenceResponse, VerifyMatchResponse
from certanchor.modules.verification.service import VerificationResult, VerificationService

router = APIRouter()


def get_verification_service(
    ledger: LedgerClientDep, settings: SettingsDep
) -> VerificationService:
    return VerificationService(
        ledger,
        canonicalization=settings.fingerprint_canonicalization,
        algorithm=settings.fingerprint_hash_algorithm,
    )


VerificationServiceDep = Annotated[VerificationService, Depends(get_verification_service)]


def _anchored_fields(result: VerificationResult) -> dict[str, object]:
    if not result.anchored:
        return {}
    record = result.ledger_record
    return {"timestamp": record.timestamp, "issuer": record.issuer}


@router.get("/verify", response_model=VerifyExistenceResponse)
async def verify_certificate_exists(
    service: VerificationServiceDep,
    certificate_number: Annotated[str, Query(alias="certificateNumber", min_length=1)],
) -> VerifyExistenceResponse:
    """Check whether a certificate number has an anchored fingerprint."""
    try:
        result = await service.verify_exists(certificate_number)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except QueryFailedError as exc:
        raise ledger_http_exception(exc) from exc

    return VerifyExistenceResponse(
        certificate_number=result.key,
        verified=result.anchored,
        fingerprint=result.ledger_record.fingerprint.hex if result.anchored else None,
        **_anchored_fields(result),
    )


@router.post("/verify", response_model=VerifyMatchResponse)
async def verify_certificate_matches(
    body: CertificateRequest,
    service: VerificationServiceDep,
) -> VerifyMatchResponse:
    """
    Recompute a certificate's fingerprint and compare it with the ledger.

    ``hashMatch`` is false both for a mismatch and for an unanchored key;
    ``verdict`` tells the two apart.
    """
    try:
        result = await service.verify_matches(body.certificate_number, body.certificate_data)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except QueryFailedError as exc:
        raise ledger_http_exception(exc) from exc

    local_fingerprint = result.local_fingerprint
    verdict = result.verdict
    if local_fingerprint is None or verdict is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="verification did not compare the supplied certificate",
        )

    return VerifyMatchResponse(
        certificate_number=result.key,
        verified=result.anchored,
        hash_match=bool(result.hash_match),
        verdict=verdict,
        local_fingerprint=local_fingerprint.hex,
        ledger_fingerprint=result.ledger_record.fingerprint.hex if result.anchored else None,
        **_anchored_fields(result),
    )

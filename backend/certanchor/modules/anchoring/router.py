"""
API Router for anchoring certificate fingerprints.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from certanchor.core.dependencies import SettingsDep
from certanchor.core.errors import InvalidInputError, SubmissionFailedError
from certanchor.modules.anchoring.schemas import CertificateRequest, StoreCertificateResponse
from certanchor.modules.anchoring.service import AnchoringService
from certanchor.modules.ledger.dependencies import LedgerClientDep, ledger_http_exception

router = APIRouter()


def get_anchoring_service(ledger: LedgerClientDep, settings: SettingsDep) -> AnchoringService:
    return AnchoringService(
        ledger,
        canonicalization=settings.fingerprint_canonicalization,
        algorithm=settings.fingerprint_hash_algorithm,
    )


AnchoringServiceDep = Annotated[AnchoringService, Depends(get_anchoring_service)]


@router.post("/store", response_model=StoreCertificateResponse)
async def store_certificate(
    body: CertificateRequest,
    service: AnchoringServiceDep,
) -> StoreCertificateResponse:
    """
    Anchor a certificate's fingerprint on the ledger.

    Returns once the ledger has confirmed the write.
    """
    try:
        receipt = await service.anchor(body.certificate_number, body.certificate_data)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SubmissionFailedError as exc:
        raise ledger_http_exception(exc) from exc

    return StoreCertificateResponse(
        certificate_number=receipt.key,
        fingerprint=receipt.fingerprint.hex,
        transaction_reference=receipt.transaction_reference,
        block_number=receipt.block_number,
    )

"""Ledger client construction and FastAPI dependency wiring."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from certanchor.core.config import Settings
from certanchor.core.errors import LedgerOperationError
from certanchor.core.logging import get_logger
from certanchor.modules.ledger.base import (
    LedgerClient,
    LedgerConfirmationTimeoutError,
    LedgerRejectedError,
)
from certanchor.modules.ledger.ethereum import EthereumLedgerClient, EthereumLedgerConfig
from certanchor.modules.ledger.memory import InMemoryLedgerClient

logger = get_logger(__name__)


def build_ledger_client(settings: Settings) -> LedgerClient:
    """Create the ledger client selected by ``settings.ledger_backend``."""
    if settings.ledger_backend == "memory":
        logger.warning("ledger_backend_memory", detail="anchors are not persisted")
        return InMemoryLedgerClient()

    config = EthereumLedgerConfig.from_settings(settings)
    logger.info(
        "ledger_backend_ethereum",
        rpc_url=config.rpc_url,
        contract_address=config.contract_address,
        chain_id=config.chain_id,
    )
    return EthereumLedgerClient(config)


def get_ledger_client(request: Request) -> LedgerClient:
    """Return the ledger client owned by the running application."""
    return request.app.state.ledger_client  # type: ignore[no-any-return]


# Type alias for dependency injection
LedgerClientDep = Annotated[LedgerClient, Depends(get_ledger_client)]


def ledger_http_exception(exc: LedgerOperationError) -> HTTPException:
    """Translate a failed ledger operation into the matching HTTP error."""
    cause = exc.cause
    if isinstance(cause, LedgerConfirmationTimeoutError):
        return HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={
                "message": str(exc),
                "transactionReference": cause.transaction_reference,
            },
        )
    if isinstance(cause, LedgerRejectedError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))

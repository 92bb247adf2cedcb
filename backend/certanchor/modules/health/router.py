"""
API Router for ledger connection status.
"""

from __future__ import annotations

from fastapi import APIRouter

from certanchor.modules.health.schemas import LedgerStatusResponse
from certanchor.modules.health.service import LedgerHealthMonitor
from certanchor.modules.ledger.dependencies import LedgerClientDep

router = APIRouter()


@router.get("/status", response_model=LedgerStatusResponse)
async def ledger_status(ledger: LedgerClientDep) -> LedgerStatusResponse:
    """Probe the ledger. Always 200; failures are reported in the body."""
    health = await LedgerHealthMonitor(ledger).check_health()
    return LedgerStatusResponse(
        connected=health.connected,
        network=health.network,
        height=health.height,
        error=health.error,
    )

"""Pydantic schemas for ledger status reporting."""

from __future__ import annotations

from pydantic import BaseModel


class LedgerStatusResponse(BaseModel):
    """Ledger connectivity as seen from this service."""

    connected: bool
    network: str | None = None
    height: int | None = None
    error: str | None = None

"""
In-memory ledger client.

Behaves like a write-once certificate registry: a key can be anchored once,
later writes for the same key are rejected. Used by the test suite and for
local runs with ``LEDGER_BACKEND=memory``.
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable

from certanchor.core.crypto.fingerprint import Fingerprint
from certanchor.core.logging import get_logger
from certanchor.modules.ledger.base import (
    ConnectionStatus,
    LedgerConfirmation,
    LedgerRecord,
    LedgerRejectedError,
    LedgerUnavailableError,
)

logger = get_logger(__name__)

DEFAULT_ISSUER = "0x00000000000000000000000000000000000000a1"


class InMemoryLedgerClient:
    """Process-local ledger satisfying ``LedgerClient``.

    Set ``offline`` to simulate an unreachable ledger; every operation then
    raises ``LedgerUnavailableError``.
    """

    def __init__(
        self,
        *,
        issuer: str = DEFAULT_ISSUER,
        network_identity: str = "memory",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._issuer = issuer
        self._network_identity = network_identity
        self._clock = clock
        self._records: dict[str, LedgerRecord] = {}
        self._height = 0
        self.offline = False

    def _ensure_online(self, operation: str, key: str | None) -> None:
        if self.offline:
            raise LedgerUnavailableError(
                "in-memory ledger is offline", operation=operation, key=key
            )

    async def submit(self, key: str, fingerprint: Fingerprint) -> LedgerConfirmation:
        self._ensure_online("submit", key)
        if fingerprint.is_empty:
            raise LedgerRejectedError(
                "refusing to anchor the empty fingerprint", operation="submit", key=key
            )
        if key in self._records:
            raise LedgerRejectedError(
                f"certificate {key!r} is already anchored", operation="submit", key=key
            )

        self._height += 1
        self._records[key] = LedgerRecord(
            fingerprint=fingerprint,
            timestamp=int(self._clock()),
            issuer=self._issuer,
        )
        tx_seed = f"{key}:{fingerprint.hex}:{self._height}".encode()
        transaction_reference = "0x" + hashlib.sha256(tx_seed).hexdigest()

        logger.debug(
            "memory_ledger_write",
            key=key,
            block_number=self._height,
            transaction_reference=transaction_reference,
        )
        return LedgerConfirmation(
            transaction_reference=transaction_reference,
            block_number=self._height,
        )

    async def query(self, key: str) -> LedgerRecord:
        self._ensure_online("query", key)
        return self._records.get(key, LedgerRecord.empty())

    async def connection_status(self) -> ConnectionStatus:
        self._ensure_online("connection_status", None)
        return ConnectionStatus(
            network_identity=self._network_identity,
            current_height=self._height,
        )

    async def close(self) -> None:
        return None

"""
Ledger readiness probe.

Checks that the ledger is reachable and reports its network identity and
height. Probe failures are returned as data, never raised, so a caller's
startup or monitoring loop keeps running.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass

from certanchor.core.logging import get_logger
from certanchor.modules.ledger.base import LedgerClient, LedgerError

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerHealth:
    """Snapshot of ledger connectivity."""

    connected: bool
    network: str | None = None
    height: int | None = None
    error: str | None = None


class LedgerHealthMonitor:
    """Advisory connectivity checks against a ``LedgerClient``."""

    def __init__(self, ledger: LedgerClient) -> None:
        self._ledger = ledger

    async def check_health(self) -> LedgerHealth:
        """
        Probe the ledger once.

        Returns:
            ``LedgerHealth`` with ``connected=True`` plus network and height,
            or ``connected=False`` and the error text.
        """
        try:
            status = await self._ledger.connection_status()
        except LedgerError as exc:
            logger.warning(
                "ledger_health_check_failed",
                error=exc.message,
                error_type=type(exc).__name__,
            )
            return LedgerHealth(connected=False, error=exc.message)
        except Exception as exc:
            logger.error("ledger_health_check_exception", error=str(exc))
            return LedgerHealth(
                connected=False,
                error=str(exc) or "Failed to connect to ledger",
            )

        logger.info(
            "ledger_health_check_ok",
            network=status.network_identity,
            height=status.current_height,
        )
        return LedgerHealth(
            connected=True,
            network=status.network_identity,
            height=status.current_height,
        )

    async def monitor(
        self,
        *,
        interval: float = 30.0,
        max_checks: int | None = None,
    ) -> AsyncIterator[LedgerHealth]:
        """Yield a health snapshot every ``interval`` seconds.

        The caller drives iteration; stopping iteration stops probing.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        checks = 0
        while max_checks is None or checks < max_checks:
            if checks:
                await asyncio.sleep(interval)
            yield await self.check_health()
            checks += 1

"""Unit tests for the ledger health monitor."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from certanchor.core.crypto.fingerprint import Fingerprint
from certanchor.modules.health.service import LedgerHealth, LedgerHealthMonitor
from certanchor.modules.ledger.memory import InMemoryLedgerClient


@pytest.mark.asyncio
async def test_health_ok(memory_ledger: InMemoryLedgerClient) -> None:
    await memory_ledger.submit("CERT-1", Fingerprint(b"\x01" * 32))

    result = await LedgerHealthMonitor(memory_ledger).check_health()

    assert result == LedgerHealth(connected=True, network="memory", height=1)


@pytest.mark.asyncio
async def test_health_reports_ledger_error(memory_ledger: InMemoryLedgerClient) -> None:
    memory_ledger.offline = True

    result = await LedgerHealthMonitor(memory_ledger).check_health()

    assert not result.connected
    assert result.error == "in-memory ledger is offline"
    assert result.network is None
    assert result.height is None


@pytest.mark.asyncio
async def test_health_reports_unexpected_exception() -> None:
    ledger = MagicMock()
    ledger.connection_status = AsyncMock(side_effect=ConnectionError("unreachable"))

    result = await LedgerHealthMonitor(ledger).check_health()

    assert not result.connected
    assert result.error == "unreachable"


@pytest.mark.asyncio
async def test_health_falls_back_to_generic_message() -> None:
    ledger = MagicMock()
    ledger.connection_status = AsyncMock(side_effect=OSError())

    result = await LedgerHealthMonitor(ledger).check_health()

    assert result.error == "Failed to connect to ledger"


@pytest.mark.asyncio
async def test_monitor_yields_requested_number_of_checks(
    memory_ledger: InMemoryLedgerClient,
) -> None:
    snapshots = [
        snapshot
        async for snapshot in LedgerHealthMonitor(memory_ledger).monitor(
            interval=0.001, max_checks=3
        )
    ]

    assert len(snapshots) == 3
    assert all(snapshot.connected for snapshot in snapshots)


@pytest.mark.asyncio
async def test_monitor_observes_ledger_going_offline(memory_ledger: InMemoryLedgerClient) -> None:
    monitor = LedgerHealthMonitor(memory_ledger).monitor(interval=0.001, max_checks=2)

    first = await anext(monitor)
    memory_ledger.offline = True
    second = await anext(monitor)

    assert first.connected
    assert not second.connected


@pytest.mark.asyncio
async def test_monitor_rejects_non_positive_interval(memory_ledger: InMemoryLedgerClient) -> None:
    with pytest.raises(ValueError, match="interval"):
        async for _ in LedgerHealthMonitor(memory_ledger).monitor(interval=0):
            pass

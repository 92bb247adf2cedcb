"""Ledger client interface and implementations."""

from certanchor.modules.ledger.base import (
    ConnectionStatus,
    LedgerClient,
    LedgerConfirmation,
    LedgerConfirmationTimeoutError,
    LedgerError,
    LedgerRecord,
    LedgerRejectedError,
    LedgerUnavailableError,
)
from certanchor.modules.ledger.ethereum import EthereumLedgerClient, EthereumLedgerConfig
from certanchor.modules.ledger.memory import InMemoryLedgerClient

__all__ = [
    "ConnectionStatus",
    "EthereumLedgerClient",
    "EthereumLedgerConfig",
    "InMemoryLedgerClient",
    "LedgerClient",
    "LedgerConfirmation",
    "LedgerConfirmationTimeoutError",
    "LedgerError",
    "LedgerRecord",
    "LedgerRejectedError",
    "LedgerUnavailableError",
]

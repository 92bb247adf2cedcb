"""Abstract protocol for ledger clients.

Defines the ``LedgerClient`` protocol that every ledger integration must
implement, plus the value objects and errors that cross that boundary.
The anchoring and verification coordinators depend only on this module,
never on a concrete client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from certanchor.core.crypto.fingerprint import EMPTY_FINGERPRINT, Fingerprint

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class LedgerError(RuntimeError):
    """Base class for failures reported by a ledger client.

    Carries the operation attempted and the key involved so a failure can be
    diagnosed without replaying it.
    """

    retryable: bool = False

    def __init__(self, message: str, *, operation: str, key: str | None = None) -> None:
        self.message = message
        self.operation = operation
        self.key = key
        super().__init__(message)


class LedgerUnavailableError(LedgerError):
    """Transient network or RPC failure. Safe to retry at an outer layer."""

    retryable = True


class LedgerRejectedError(LedgerError):
    """The ledger refused the request (revert, funds, duplicate key, misconfiguration)."""


class LedgerConfirmationTimeoutError(LedgerError):
    """A transaction was sent but not confirmed before the client's deadline.

    The write may still land, so blind resubmission is unsafe; check the key's
    ledger record first.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        key: str | None = None,
        transaction_reference: str,
    ) -> None:
        self.transaction_reference = transaction_reference
        super().__init__(message, operation=operation, key=key)


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerConfirmation:
    """Acknowledgement that a submitted write is durably recorded."""

    transaction_reference: str
    block_number: int | None = None


@dataclass(frozen=True)
class LedgerRecord:
    """Read-side view of a key on the ledger.

    Unknown keys are represented by the all-zero fingerprint, not by an error.
    """

    fingerprint: Fingerprint
    timestamp: int = 0
    issuer: str = ""

    @classmethod
    def empty(cls) -> LedgerRecord:
        return cls(fingerprint=EMPTY_FINGERPRINT)

    @property
    def exists(self) -> bool:
        return not self.fingerprint.is_empty


@dataclass(frozen=True)
class ConnectionStatus:
    """Identity and height reported by a reachable ledger."""

    network_identity: str
    current_height: int
    chain_id: int | None = None


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class LedgerClient(Protocol):
    """Protocol for certificate fingerprint ledger operations."""

    async def submit(self, key: str, fingerprint: Fingerprint) -> LedgerConfirmation:
        """Write ``(key, fingerprint)`` and return once the write is confirmed."""
        ...

    async def query(self, key: str) -> LedgerRecord:
        """Read the record for ``key``. Unknown keys yield ``LedgerRecord.empty()``."""
        ...

    async def connection_status(self) -> ConnectionStatus:
        """Probe liveness and report network identity and height."""
        ...

    async def close(self) -> None:
        """Release any network resources held by the client."""
        ...

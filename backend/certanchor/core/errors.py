"""
Errors raised by the anchoring and verification coordinators.

Ledger-level failures (``LedgerError`` and subclasses) live with the ledger
client interface; the coordinators wrap them in the operation errors below
so callers can tell a malformed request from a failed ledger call.
"""

from __future__ import annotations

from certanchor.modules.ledger.base import LedgerError


class InvalidInputError(ValueError):
    """Raised when a key or certificate record is missing or malformed."""


class LedgerOperationError(RuntimeError):
    """A ledger call made on behalf of a coordinator failed."""

    def __init__(self, *, operation: str, key: str, cause: LedgerError) -> None:
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(f"Ledger {operation} failed for {key!r}: {cause.message}")

    @property
    def retryable(self) -> bool:
        return self.cause.retryable


class SubmissionFailedError(LedgerOperationError):
    """The ledger write for an anchoring request failed."""

    def __init__(self, *, key: str, cause: LedgerError) -> None:
        super().__init__(operation="submit", key=key, cause=cause)


class QueryFailedError(LedgerOperationError):
    """The ledger read for a verification request failed."""

    def __init__(self, *, key: str, cause: LedgerError) -> None:
        super().__init__(operation="query", key=key, cause=cause)

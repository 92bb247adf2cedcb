"""
Ethereum JSON-RPC ledger client.

Mirrors the connector client pattern: persistent httpx.AsyncClient, dataclass
config object, structured logging, and explicit ``close()`` lifecycle.

Transactions are sent with ``eth_sendTransaction``; the node or signer proxy
behind the RPC endpoint owns the sender's key, so no key material passes
through this process.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from dataclasses import dataclass
from typing import Any

import httpx

from certanchor.core.config import ZERO_ADDRESS, Settings
from certanchor.core.crypto.fingerprint import Fingerprint
from certanchor.core.logging import get_logger
from certanchor.modules.ledger.abi import (
    decode_certificate_hash,
    decode_verify_certificate,
    encode_get_certificate_hash,
    encode_store_certificate,
    encode_verify_certificate,
)
from certanchor.modules.ledger.base import (
    ConnectionStatus,
    LedgerConfirmation,
    LedgerConfirmationTimeoutError,
    LedgerError,
    LedgerRecord,
    LedgerRejectedError,
    LedgerUnavailableError,
)

logger = get_logger(__name__)

KNOWN_NETWORKS: dict[int, str] = {
    1: "mainnet",
    10: "optimism",
    137: "matic",
    17000: "holesky",
    42161: "arbitrum",
    11155111: "sepolia",
    31337: "hardhat",
}

# JSON-RPC error messages that mean the node refused the call itself.
_REJECTION_MARKERS = (
    "revert",
    "insufficient funds",
    "gas required exceeds",
    "nonce too low",
    "already known",
    "underpriced",
    "unknown account",
)


@dataclass(frozen=True)
class EthereumLedgerConfig:
    """Configuration for one CertificateRegistry deployment."""

    rpc_url: str
    contract_address: str
    sender_address: str = ""
    chain_id: int = 11155111
    request_timeout: float = 30.0
    confirmation_timeout: float = 300.0
    poll_interval: float = 2.0
    required_confirmations: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> EthereumLedgerConfig:
        return cls(
            rpc_url=settings.blockchain_rpc_url,
            contract_address=settings.certificate_contract_address,
            sender_address=settings.blockchain_sender_address,
            chain_id=settings.blockchain_chain_id,
            request_timeout=settings.blockchain_request_timeout,
            confirmation_timeout=settings.blockchain_confirmation_timeout,
            poll_interval=settings.blockchain_poll_interval,
            required_confirmations=settings.blockchain_required_confirmations,
        )


def _is_unset_address(address: str) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


class EthereumLedgerClient:
    """
    ``LedgerClient`` backed by a CertificateRegistry contract.

    Each call is a single JSON-RPC round trip except ``submit``, which sends
    one transaction and then polls for its receipt until the configured
    confirmation depth or deadline is reached.
    """

    def __init__(
        self,
        config: EthereumLedgerConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None
        self._request_ids = itertools.count(1)

    def _rpc_url(self, operation: str, key: str | None) -> str:
        url = (self._config.rpc_url or "").strip()
        if not url:
            raise LedgerRejectedError(
                "Ethereum RPC URL is not configured", operation=operation, key=key
            )
        return url

    async def _get_client(self) -> httpx.AsyncClient:
        """Return (or lazily create) the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                headers={"Content-Type": "application/json"},
                timeout=self._config.request_timeout,
                transport=self._transport,
            )
        return self._http_client

    # ------------------------------------------------------------------
    # JSON-RPC plumbing
    # ------------------------------------------------------------------

    async def _rpc(
        self,
        method: str,
        params: list[Any],
        *,
        operation: str,
        key: str | None = None,
    ) -> Any:
        url = self._rpc_url(operation, key)
        client = await self._get_client()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }

        try:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise LedgerUnavailableError(
                f"{method} timed out: {exc}", operation=operation, key=key
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise LedgerUnavailableError(
                f"{method} returned HTTP {exc.response.status_code}",
                operation=operation,
                key=key,
            ) from exc
        except httpx.HTTPError as exc:
            raise LedgerUnavailableError(
                f"{method} failed: {exc}", operation=operation, key=key
            ) from exc
        except ValueError as exc:
            raise LedgerUnavailableError(
                f"{method} returned a non-JSON response", operation=operation, key=key
            ) from exc

        if not isinstance(body, dict):
            raise LedgerUnavailableError(
                f"{method} returned a malformed JSON-RPC envelope", operation=operation, key=key
            )

        error = body.get("error")
        if error:
            raise self._map_rpc_error(method, error, operation=operation, key=key)
        if "result" not in body:
            raise LedgerUnavailableError(
                f"{method} returned neither result nor error", operation=operation, key=key
            )
        return body["result"]

    @staticmethod
    def _map_rpc_error(
        method: str,
        error: Any,
        *,
        operation: str,
        key: str | None,
    ) -> LedgerError:
        if isinstance(error, dict):
            code = error.get("code")
            message = str(error.get("message") or "unknown error")
        else:
            code = None
            message = str(error)

        detail = f"{method} failed: {message}"
        lowered = message.lower()
        # Code 3 is the standard "execution reverted" error.
        if code == 3 or any(marker in lowered for marker in _REJECTION_MARKERS):
            return LedgerRejectedError(detail, operation=operation, key=key)
        return LedgerUnavailableError(detail, operation=operation, key=key)

    @staticmethod
    def _quantity(value: Any, *, field: str, operation: str, key: str | None) -> int:
        try:
            return int(value, 16)
        except (TypeError, ValueError) as exc:
            raise LedgerUnavailableError(
                f"malformed {field} in RPC response: {value!r}", operation=operation, key=key
            ) from exc

    def _require_contract(self, operation: str, key: str | None) -> str:
        address = self._config.contract_address
        if _is_unset_address(address):
            raise LedgerRejectedError(
                "certificate contract address is not configured", operation=operation, key=key
            )
        return address

    # ------------------------------------------------------------------
    # LedgerClient operations
    # ------------------------------------------------------------------

    async def submit(self, key: str, fingerprint: Fingerprint) -> LedgerConfirmation:
        """Send ``storeCertificate`` and wait for confirmation."""
        contract = self._require_contract("submit", key)
        sender = self._config.sender_address
        if _is_unset_address(sender):
            raise LedgerRejectedError(
                "sender address is not configured", operation="submit", key=key
            )

        transaction = {
            "from": sender,
            "to": contract,
            "data": encode_store_certificate(key, fingerprint.digest),
            "chainId": hex(self._config.chain_id),
        }

        logger.info("ledger_transaction_sending", key=key, contract=contract)
        tx_hash = await self._rpc("eth_sendTransaction", [transaction], operation="submit", key=key)
        if not isinstance(tx_hash, str):
            raise LedgerUnavailableError(
                f"eth_sendTransaction returned {tx_hash!r}", operation="submit", key=key
            )
        logger.info("ledger_transaction_sent", key=key, transaction_reference=tx_hash)

        block_number = await self._wait_for_confirmation(tx_hash, key=key)

        logger.info(
            "ledger_transaction_confirmed",
            key=key,
            transaction_reference=tx_hash,
            block_number=block_number,
        )
        return LedgerConfirmation(transaction_reference=tx_hash, block_number=block_number)

    async def _wait_for_confirmation(self, tx_hash: str, *, key: str) -> int:
        """Poll for the receipt until mined and deep enough, or time out."""
        deadline = time.monotonic() + self._config.confirmation_timeout

        while True:
            try:
                block_number = await self._confirmed_block(tx_hash, key=key)
            except LedgerUnavailableError as exc:
                # The transaction is already out; a failed poll is not a failed write.
                logger.warning(
                    "ledger_receipt_poll_failed",
                    key=key,
                    transaction_reference=tx_hash,
                    error=exc.message,
                )
                block_number = None

            if block_number is not None:
                return block_number

            if time.monotonic() >= deadline:
                raise LedgerConfirmationTimeoutError(
                    f"transaction {tx_hash} not confirmed within "
                    f"{self._config.confirmation_timeout:g}s",
                    operation="submit",
                    key=key,
                    transaction_reference=tx_hash,
                )
            await asyncio.sleep(self._config.poll_interval)

    async def _confirmed_block(self, tx_hash: str, *, key: str) -> int | None:
        receipt = await self._rpc(
            "eth_getTransactionReceipt", [tx_hash], operation="submit", key=key
        )
        if not isinstance(receipt, dict) or receipt.get("blockNumber") is None:
            return None

        if receipt.get("status") == "0x0":
            raise LedgerRejectedError(
                f"transaction {tx_hash} reverted", operation="submit", key=key
            )

        block_number = self._quantity(
            receipt["blockNumber"], field="blockNumber", operation="submit", key=key
        )
        if self._config.required_confirmations <= 1:
            return block_number

        head = self._quantity(
            await self._rpc("eth_blockNumber", [], operation="submit", key=key),
            field="blockNumber",
            operation="submit",
            key=key,
        )
        if head - block_number + 1 >= self._config.required_confirmations:
            return block_number
        return None

    async def _call_contract(self, data: str, *, operation: str, key: str) -> str:
        """``eth_call`` the registry at ``latest`` and return the raw result."""
        contract = self._require_contract(operation, key)
        result = await self._rpc(
            "eth_call",
            [{"to": contract, "data": data}, "latest"],
            operation=operation,
            key=key,
        )
        if not isinstance(result, str) or result in ("0x", ""):
            raise LedgerRejectedError(
                f"no CertificateRegistry code answered at {contract}",
                operation=operation,
                key=key,
            )
        return result

    async def query(self, key: str) -> LedgerRecord:
        """Read a certificate through ``verifyCertificate``."""
        result = await self._call_contract(
            encode_verify_certificate(key), operation="query", key=key
        )
        try:
            decoded = decode_verify_certificate(result)
        except ValueError as exc:
            raise LedgerRejectedError(
                f"undecodable verifyCertificate result: {exc}", operation="query", key=key
            ) from exc

        fingerprint = Fingerprint(decoded.certificate_hash)
        if fingerprint.is_empty:
            return LedgerRecord.empty()
        return LedgerRecord(
            fingerprint=fingerprint,
            timestamp=decoded.timestamp,
            issuer=decoded.issuer,
        )

    async def query_fingerprint(self, key: str) -> Fingerprint:
        """Read only the anchored hash through ``getCertificateHash``.

        Returns ``EMPTY_FINGERPRINT`` for an unknown key. Cheaper than
        ``query`` when the timestamp and issuer are not needed.
        """
        result = await self._call_contract(
            encode_get_certificate_hash(key), operation="query", key=key
        )
        try:
            return Fingerprint(decode_certificate_hash(result))
        except ValueError as exc:
            raise LedgerRejectedError(
                f"undecodable getCertificateHash result: {exc}", operation="query", key=key
            ) from exc

    async def connection_status(self) -> ConnectionStatus:
        """Report chain identity and head block."""
        chain_id = self._quantity(
            await self._rpc("eth_chainId", [], operation="connection_status"),
            field="chainId",
            operation="connection_status",
            key=None,
        )
        height = self._quantity(
            await self._rpc("eth_blockNumber", [], operation="connection_status"),
            field="blockNumber",
            operation="connection_status",
            key=None,
        )

        if chain_id != self._config.chain_id:
            logger.warning(
                "ledger_chain_id_mismatch",
                expected=self._config.chain_id,
                actual=chain_id,
            )

        return ConnectionStatus(
            network_identity=KNOWN_NETWORKS.get(chain_id, f"chain-{chain_id}"),
            current_height=height,
            chain_id=chain_id,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

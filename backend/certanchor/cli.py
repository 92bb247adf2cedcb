"""Command-line access to certificate anchoring (store, verify, status, fingerprint)."""

from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from certanchor.core.config import Settings, get_settings
from certanchor.core.crypto.fingerprint import derive_fingerprint
from certanchor.core.errors import InvalidInputError, LedgerOperationError
from certanchor.core.logging import configure_logging
from certanchor.core.validation import coerce_record
from certanchor.modules.anchoring.service import AnchoringService
from certanchor.modules.health.service import LedgerHealthMonitor
from certanchor.modules.ledger.base import LedgerClient, LedgerConfirmationTimeoutError
from certanchor.modules.ledger.dependencies import build_ledger_client
from certanchor.modules.verification.service import VerificationService

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_INPUT = 2


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="certanchor",
        description="Anchor certificate fingerprints on the ledger and verify them.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    store = commands.add_parser("store", help="Anchor a certificate's fingerprint.")
    store.add_argument("certificate_number")
    store.add_argument(
        "--record",
        required=True,
        help="Certificate data as a JSON object, or @path to a JSON file.",
    )

    verify = commands.add_parser(
        "verify",
        help="Check that a certificate is anchored; with --record, that it matches.",
    )
    verify.add_argument("certificate_number")
    verify.add_argument("--record", help="Certificate data as JSON, or @path to a JSON file.")

    fingerprint = commands.add_parser(
        "fingerprint", help="Print a certificate's fingerprint without touching the ledger."
    )
    fingerprint.add_argument("--record", required=True)

    commands.add_parser("status", help="Probe ledger connectivity.")
    return parser.parse_args(argv)


def _load_record(raw: str) -> dict[str, Any]:
    if raw.startswith("@"):
        try:
            text = Path(raw[1:]).read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidInputError(f"cannot read certificate file: {exc}") from exc
    else:
        text = raw
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"certificate data is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidInputError("certificate data must be a JSON object")
    return data


async def _store(
    args: argparse.Namespace, ledger: LedgerClient, settings: Settings
) -> tuple[int, dict[str, Any]]:
    service = AnchoringService(
        ledger,
        canonicalization=settings.fingerprint_canonicalization,
        algorithm=settings.fingerprint_hash_algorithm,
    )
    receipt = await service.anchor(args.certificate_number, _load_record(args.record))
    return EXIT_OK, {
        "certificateNumber": receipt.key,
        "fingerprint": receipt.fingerprint.hex,
        "transactionReference": receipt.transaction_reference,
        "blockNumber": receipt.block_number,
    }


async def _verify(
    args: argparse.Namespace, ledger: LedgerClient, settings: Settings
) -> tuple[int, dict[str, Any]]:
    service = VerificationService(
        ledger,
        canonicalization=settings.fingerprint_canonicalization,
        algorithm=settings.fingerprint_hash_algorithm,
    )
    if args.record is None:
        result = await service.verify_exists(args.certificate_number)
    else:
        result = await service.verify_matches(args.certificate_number, _load_record(args.record))

    summary: dict[str, Any] = {
        "certificateNumber": result.key,
        "verified": result.anchored,
    }
    if result.anchored:
        summary.update(
            ledgerFingerprint=result.ledger_record.fingerprint.hex,
            timestamp=result.ledger_record.timestamp,
            issuer=result.ledger_record.issuer,
        )
    if result.local_fingerprint is not None:
        summary["localFingerprint"] = result.local_fingerprint.hex
        summary["hashMatch"] = bool(result.hash_match)
    if result.verdict is not None:
        summary["verdict"] = result.verdict.value

    ok = result.anchored and result.hash_match is not False
    return (EXIT_OK if ok else EXIT_FAILED), summary


async def _status(ledger: LedgerClient) -> tuple[int, dict[str, Any]]:
    health = await LedgerHealthMonitor(ledger).check_health()
    summary = {
        "connected": health.connected,
        "network": health.network,
        "height": health.height,
        "error": health.error,
    }
    return (EXIT_OK if health.connected else EXIT_FAILED), summary


async def _run(
    args: argparse.Namespace,
    settings: Settings,
    ledger_client: LedgerClient | None,
) -> tuple[int, dict[str, Any]]:
    if args.command == "fingerprint":
        record = coerce_record(_load_record(args.record))
        fingerprint = derive_fingerprint(
            record,
            canonicalization=settings.fingerprint_canonicalization,
            algorithm=settings.fingerprint_hash_algorithm,
        )
        return EXIT_OK, {"fingerprint": fingerprint.hex}

    ledger = ledger_client or build_ledger_client(settings)
    try:
        if args.command == "store":
            return await _store(args, ledger, settings)
        if args.command == "verify":
            return await _verify(args, ledger, settings)
        return await _status(ledger)
    finally:
        if ledger_client is None:
            await ledger.close()


def main(
    argv: Sequence[str] | None = None,
    *,
    settings: Settings | None = None,
    ledger_client: LedgerClient | None = None,
) -> int:
    args = _parse_args(argv)
    settings = settings or get_settings()
    configure_logging(settings)

    try:
        exit_code, summary = asyncio.run(_run(args, settings, ledger_client))
    except InvalidInputError as exc:
        exit_code, summary = EXIT_INVALID_INPUT, {"error": str(exc)}
    except LedgerOperationError as exc:
        summary = {
            "error": str(exc),
            "operation": exc.operation,
            "retryable": exc.retryable,
        }
        if isinstance(exc.cause, LedgerConfirmationTimeoutError):
            summary["transactionReference"] = exc.cause.transaction_reference
        exit_code = EXIT_FAILED

    print(json.dumps(summary, indent=2))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())

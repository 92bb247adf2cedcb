"""Unit tests for the certificate verification service."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from certanchor.core.certificate import CertificateRecord
from certanchor.core.crypto.fingerprint import HASH_SHA256, derive_fingerprint
from certanchor.core.errors import InvalidInputError, QueryFailedError
from certanchor.modules.anchoring.service import AnchoringService
from certanchor.modules.ledger.base import LedgerRecord, LedgerUnavailableError
from certanchor.modules.ledger.memory import DEFAULT_ISSUER, InMemoryLedgerClient
from certanchor.modules.verification.service import (
    VerificationResult,
    VerificationService,
    VerificationVerdict,
)

KEY = "CERT-2025-ABC123"


async def _anchor(ledger: InMemoryLedgerClient, record: CertificateRecord) -> None:
    await AnchoringService(ledger).anchor(KEY, record)


@pytest.mark.asyncio
async def test_verify_exists_for_unknown_key(memory_ledger: InMemoryLedgerClient) -> None:
    result = await VerificationService(memory_ledger).verify_exists(KEY)

    assert not result.anchored
    assert result.ledger_record == LedgerRecord.empty()
    assert result.verdict is VerificationVerdict.NOT_ANCHORED


@pytest.mark.asyncio
async def test_verify_exists_for_anchored_key(
    memory_ledger: InMemoryLedgerClient,
    sample_record: CertificateRecord,
) -> None:
    await _anchor(memory_ledger, sample_record)

    result = await VerificationService(memory_ledger).verify_exists(KEY)

    assert result.anchored
    assert result.ledger_record.fingerprint == derive_fingerprint(sample_record)
    assert result.ledger_record.timestamp == 1_736_899_200
    assert result.ledger_record.issuer == DEFAULT_ISSUER
    assert result.local_fingerprint is None
    assert result.verdict is None


@pytest.mark.asyncio
async def test_verify_matches_untampered_record(
    memory_ledger: InMemoryLedgerClient,
    sample_record: CertificateRecord,
) -> None:
    await _anchor(memory_ledger, sample_record)

    result = await VerificationService(memory_ledger).verify_matches(KEY, sample_record)

    assert result.anchored
    assert result.hash_match is True
    assert result.local_fingerprint == result.ledger_record.fingerprint
    assert result.verdict is VerificationVerdict.ANCHORED_AND_MATCHES


@pytest.mark.asyncio
async def test_verify_matches_detects_tampering(
    memory_ledger: InMemoryLedgerClient,
    sample_record: CertificateRecord,
    sample_record_data: dict,
) -> None:
    await _anchor(memory_ledger, sample_record)
    tampered = {**sample_record_data, "recipientName": "Jane Doe"}

    result = await VerificationService(memory_ledger).verify_matches(KEY, tampered)

    assert result.anchored
    assert result.hash_match is False
    assert result.local_fingerprint != result.ledger_record.fingerprint
    assert result.verdict is VerificationVerdict.ANCHORED_BUT_MISMATCH


@pytest.mark.asyncio
async def test_verify_matches_needs_the_algorithm_used_to_anchor(
    memory_ledger: InMemoryLedgerClient,
    sample_record: CertificateRecord,
) -> None:
    await AnchoringService(memory_ledger, algorithm=HASH_SHA256).anchor(KEY, sample_record)

    same = await VerificationService(memory_ledger, algorithm=HASH_SHA256).verify_matches(
        KEY, sample_record
    )
    default = await VerificationService(memory_ledger).verify_matches(KEY, sample_record)

    assert same.verdict is VerificationVerdict.ANCHORED_AND_MATCHES
    assert default.verdict is VerificationVerdict.ANCHORED_BUT_MISMATCH


@pytest.mark.asyncio
async def test_verify_matches_unknown_key_is_not_anchored(
    memory_ledger: InMemoryLedgerClient,
    sample_record: CertificateRecord,
) -> None:
    result = await VerificationService(memory_ledger).verify_matches(KEY, sample_record)

    assert not result.anchored
    assert result.hash_match is None
    assert result.local_fingerprint == derive_fingerprint(sample_record)
    assert result.verdict is VerificationVerdict.NOT_ANCHORED


@pytest.mark.asyncio
async def test_verify_exists_wraps_ledger_failure(memory_ledger: InMemoryLedgerClient) -> None:
    memory_ledger.offline = True

    with pytest.raises(QueryFailedError) as exc_info:
        await VerificationService(memory_ledger).verify_exists(KEY)

    assert isinstance(exc_info.value.cause, LedgerUnavailableError)
    assert exc_info.value.operation == "query"
    assert exc_info.value.retryable


@pytest.mark.asyncio
async def test_verify_matches_wraps_ledger_failure(
    memory_ledger: InMemoryLedgerClient,
    sample_record: CertificateRecord,
) -> None:
    memory_ledger.offline = True

    with pytest.raises(QueryFailedError):
        await VerificationService(memory_ledger).verify_matches(KEY, sample_record)


@pytest.mark.asyncio
async def test_invalid_input_is_rejected_before_querying() -> None:
    ledger = MagicMock()
    ledger.query = AsyncMock()
    service = VerificationService(ledger)

    with pytest.raises(InvalidInputError):
        await service.verify_exists("   ")
    with pytest.raises(InvalidInputError):
        await service.verify_matches(KEY, {"certificateNumber": KEY})

    ledger.query.assert_not_awaited()


def test_verdict_values() -> None:
    assert VerificationVerdict.NOT_ANCHORED.value == "not-anchored"
    assert VerificationVerdict.ANCHORED_AND_MATCHES.value == "anchored-and-matches"
    assert VerificationVerdict.ANCHORED_BUT_MISMATCH.value == "anchored-but-mismatch"


def test_result_without_comparison_has_no_verdict(sample_record: CertificateRecord) -> None:
    record = LedgerRecord(fingerprint=derive_fingerprint(sample_record), timestamp=1)

    assert VerificationResult(key=KEY, ledger_record=record).verdict is None

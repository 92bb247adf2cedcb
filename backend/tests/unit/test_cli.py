"""Tests for the certanchor command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from certanchor.cli import EXIT_FAILED, EXIT_INVALID_INPUT, EXIT_OK, main
from certanchor.core.config import Settings
from certanchor.modules.ledger.memory import InMemoryLedgerClient

KEY = "CERT-2025-ABC123"


def _run(
    capsys: pytest.CaptureFixture[str],
    argv: list[str],
    settings: Settings,
    ledger: InMemoryLedgerClient | None = None,
) -> tuple[int, dict]:
    exit_code = main(argv, settings=settings, ledger_client=ledger)
    return exit_code, json.loads(capsys.readouterr().out)


def test_fingerprint_command(
    capsys: pytest.CaptureFixture[str],
    memory_settings: Settings,
    sample_record_data: dict,
    sample_fingerprint_hex: str,
) -> None:
    exit_code, output = _run(
        capsys,
        ["fingerprint", "--record", json.dumps(sample_record_data)],
        memory_settings,
    )

    assert exit_code == EXIT_OK
    assert output == {"fingerprint": sample_fingerprint_hex}


def test_store_then_verify(
    capsys: pytest.CaptureFixture[str],
    memory_settings: Settings,
    memory_ledger: InMemoryLedgerClient,
    sample_record_data: dict,
    sample_fingerprint_hex: str,
) -> None:
    record = json.dumps(sample_record_data)

    store_code, stored = _run(
        capsys, ["store", KEY, "--record", record], memory_settings, memory_ledger
    )
    verify_code, verified = _run(
        capsys, ["verify", KEY, "--record", record], memory_settings, memory_ledger
    )

    assert store_code == EXIT_OK
    assert stored["fingerprint"] == sample_fingerprint_hex
    assert stored["blockNumber"] == 1
    assert verify_code == EXIT_OK
    assert verified["hashMatch"] is True
    assert verified["verdict"] == "anchored-and-matches"


def test_verify_existence_only(
    capsys: pytest.CaptureFixture[str],
    memory_settings: Settings,
    memory_ledger: InMemoryLedgerClient,
    sample_record_data: dict,
) -> None:
    _run(
        capsys,
        ["store", KEY, "--record", json.dumps(sample_record_data)],
        memory_settings,
        memory_ledger,
    )

    exit_code, output = _run(capsys, ["verify", KEY], memory_settings, memory_ledger)

    assert exit_code == EXIT_OK
    assert output["verified"] is True
    assert "hashMatch" not in output
    assert "verdict" not in output


def test_verify_tampered_record_fails(
    capsys: pytest.CaptureFixture[str],
    memory_settings: Settings,
    memory_ledger: InMemoryLedgerClient,
    sample_record_data: dict,
) -> None:
    _run(
        capsys,
        ["store", KEY, "--record", json.dumps(sample_record_data)],
        memory_settings,
        memory_ledger,
    )
    tampered = json.dumps({**sample_record_data, "recipientName": "Jane Doe"})

    exit_code, output = _run(
        capsys, ["verify", KEY, "--record", tampered], memory_settings, memory_ledger
    )

    assert exit_code == EXIT_FAILED
    assert output["verdict"] == "anchored-but-mismatch"


def test_verify_unknown_certificate_fails(
    capsys: pytest.CaptureFixture[str],
    memory_settings: Settings,
    memory_ledger: InMemoryLedgerClient,
) -> None:
    exit_code, output = _run(capsys, ["verify", KEY], memory_settings, memory_ledger)

    assert exit_code == EXIT_FAILED
    assert output["verified"] is False
    assert output["verdict"] == "not-anchored"


def test_record_can_be_read_from_file(
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
    memory_settings: Settings,
    sample_record_data: dict,
    sample_fingerprint_hex: str,
) -> None:
    record_file = tmp_path / "certificate.json"
    record_file.write_text(json.dumps(sample_record_data), encoding="utf-8")

    exit_code, output = _run(
        capsys, ["fingerprint", "--record", f"@{record_file}"], memory_settings
    )

    assert exit_code == EXIT_OK
    assert output["fingerprint"] == sample_fingerprint_hex


@pytest.mark.parametrize(
    "record",
    ["{not json", "[1, 2]", "@/nonexistent/certificate.json", '{"certificateNumber": "X"}'],
)
def test_invalid_record_exits_with_input_error(
    capsys: pytest.CaptureFixture[str], memory_settings: Settings, record: str
) -> None:
    exit_code, output = _run(capsys, ["fingerprint", "--record", record], memory_settings)

    assert exit_code == EXIT_INVALID_INPUT
    assert "error" in output


def test_duplicate_store_reports_ledger_failure(
    capsys: pytest.CaptureFixture[str],
    memory_settings: Settings,
    memory_ledger: InMemoryLedgerClient,
    sample_record_data: dict,
) -> None:
    argv = ["store", KEY, "--record", json.dumps(sample_record_data)]
    _run(capsys, argv, memory_settings, memory_ledger)

    exit_code, output = _run(capsys, argv, memory_settings, memory_ledger)

    assert exit_code == EXIT_FAILED
    assert output["operation"] == "submit"
    assert output["retryable"] is False
    assert "already anchored" in output["error"]


def test_status_command(
    capsys: pytest.CaptureFixture[str],
    memory_settings: Settings,
    memory_ledger: InMemoryLedgerClient,
) -> None:
    ok_code, ok = _run(capsys, ["status"], memory_settings, memory_ledger)
    memory_ledger.offline = True
    down_code, down = _run(capsys, ["status"], memory_settings, memory_ledger)

    assert ok_code == EXIT_OK
    assert ok["connected"] is True
    assert ok["network"] == "memory"
    assert down_code == EXIT_FAILED
    assert down["connected"] is False

"""
Pytest fixtures for backend testing.
Provides certificate records, an in-memory ledger, and an API test client.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from certanchor.core.certificate import CertificateRecord
from certanchor.core.config import Settings, get_settings
from certanchor.main import create_application
from certanchor.modules.ledger.memory import InMemoryLedgerClient

# Keccak-256 of the ordered canonical JSON of ``sample_record_data``
SAMPLE_FINGERPRINT_HEX = "0x032a75a8cd0e9bea7aecc780dd71348829b01f97e78d3d47a9683edfe581276e"


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Ensure each test reads settings fresh."""
    get_settings.cache_clear()


@pytest.fixture
def sample_record_data() -> dict[str, Any]:
    return {
        "certificateNumber": "CERT-2025-ABC123",
        "recipientName": "John Doe",
        "certificateType": "Achievement",
        "issueDate": "2025-01-15",
        "issuingEntityId": 1,
    }


@pytest.fixture
def sample_record(sample_record_data: dict[str, Any]) -> CertificateRecord:
    return CertificateRecord.model_validate(sample_record_data)


@pytest.fixture
def sample_fingerprint_hex() -> str:
    return SAMPLE_FINGERPRINT_HEX


@pytest.fixture
def memory_ledger() -> InMemoryLedgerClient:
    return InMemoryLedgerClient(clock=lambda: 1_736_899_200.0)


@pytest.fixture
def memory_settings() -> Settings:
    return Settings(environment="development", ledger_backend="memory")


@pytest_asyncio.fixture
async def test_client(
    memory_settings: Settings,
    memory_ledger: InMemoryLedgerClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an API client backed by the in-memory ledger."""
    app = create_application(memory_settings, ledger_client=memory_ledger)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

"""
Application configuration using Pydantic Settings.
All configuration is loaded from environment variables with sensible defaults.
"""

import warnings
from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ZERO_ADDRESS = "0x" + "0" * 40


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Settings are read once at the process edge and converted into explicit
    configuration values (see ``EthereumLedgerConfig.from_settings``) before
    being handed to ledger clients.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Core Application Settings
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API Configuration
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Certificate Anchoring Service"
    version: str = "0.1.0"

    # CORS settings
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:5173",
            "http://localhost:3000",
        ]
    )

    # ==========================================================================
    # Ledger Configuration
    # ==========================================================================
    ledger_backend: Literal["ethereum", "memory"] = Field(
        default="ethereum",
        description="Ledger client implementation (memory is for tests and local demos)",
    )
    blockchain_rpc_url: str = Field(
        default="http://localhost:8545",
        min_length=1,
        description="Ethereum JSON-RPC endpoint",
    )
    certificate_contract_address: str = Field(
        default=ZERO_ADDRESS,
        pattern=r"^0x[0-9a-fA-F]{40}$",
        description="Address of the deployed CertificateRegistry contract",
    )
    blockchain_sender_address: str = Field(
        default="",
        description=(
            "Issuer account used as the transaction sender. The node or signer "
            "proxy behind the RPC endpoint holds its key."
        ),
    )
    blockchain_chain_id: int = Field(default=11155111, ge=1, description="Sepolia by default")
    blockchain_request_timeout: float = Field(
        default=30.0, gt=0, description="Per-request JSON-RPC timeout in seconds"
    )
    blockchain_confirmation_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Maximum seconds to wait for a submitted transaction to confirm",
    )
    blockchain_poll_interval: float = Field(
        default=2.0, gt=0, description="Seconds between receipt polls"
    )
    blockchain_required_confirmations: int = Field(default=1, ge=1, le=64)

    # ==========================================================================
    # Fingerprint Configuration
    # ==========================================================================
    fingerprint_canonicalization: Literal["ordered-json-v1", "rfc8785"] = Field(
        default="ordered-json-v1",
        description="Canonical serialization applied to certificate records before hashing",
    )
    fingerprint_hash_algorithm: Literal["keccak-256", "sha-256"] = Field(
        default="keccak-256",
        description="Digest stored on the ledger; keccak-256 matches the CertificateRegistry",
    )

    # ==========================================================================
    # Production Safety Checks
    # ==========================================================================

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Self:
        """Enforce ledger settings in production/staging."""
        if self.environment in ("production", "staging"):
            if self.debug:
                raise ValueError(f"debug must be False in {self.environment} environment")
            if self.ledger_backend == "memory":
                raise ValueError(
                    f"ledger_backend 'memory' is not allowed in {self.environment} environment"
                )
            if self.certificate_contract_address.lower() == ZERO_ADDRESS:
                raise ValueError(
                    f"certificate_contract_address must be set in {self.environment} environment"
                )
            if not self.blockchain_sender_address:
                raise ValueError(
                    f"blockchain_sender_address must be set in {self.environment} environment"
                )
        elif (
            self.ledger_backend == "ethereum"
            and self.certificate_contract_address.lower() == ZERO_ADDRESS
        ):
            warnings.warn(
                "certificate_contract_address is the zero address; ledger writes "
                "will be refused until it is configured.",
                UserWarning,
                stacklevel=2,
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated environment variable parsing.
    """
    return Settings()

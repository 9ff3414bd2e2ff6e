#!/usr/bin/env python3
"""
PUMPBUNDLER - Core Configuration

Tip amounts, commitment levels, relay endpoints, and environment management.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv
from solders.pubkey import Pubkey

LAMPORTS_PER_SOL = 1_000_000_000

# Jito tip accounts (one is picked at random per submission)
JITO_TIP_ACCOUNTS = [
    "96gYZGLnJYVFmbjzopPSU6QiEV5fGqZNyN9nmNhvrZU5",
    "HFqU5x63VTqvQss8hp11i4wVV8bD44PvwucfZ2bU7gRe",
    "Cw8CFyM9FkoMi7K7Crf6HNQqf4uEMzpKw6QNghXLvLkY",
    "ADaUMid9yfUytqMBgopwjb2DTLSokTSzL1zt6iGPaS49",
    "DfXygSm4jCyNCybVYYK6DwvWqjKee8pbDmJGcLWNDXjh",
    "ADuUkR4vqLUMWXxW9gh6D6L8pMSawimctcNZ5pGwDcEt",
    "DttWaMuVvTiduZRnguLF7jNxTgiMBZ1hyAumKUiL2KRL",
    "3AVi9Tg9Uo68tJfuvoKvqKNWKkC5wPdSSdeBnizKZ6jT",
]

# Jito block engines by region
BLOCK_ENGINES = {
    "mainnet": "https://mainnet.block-engine.jito.wtf",
    "ny": "https://ny.mainnet.block-engine.jito.wtf",
    "amsterdam": "https://amsterdam.mainnet.block-engine.jito.wtf",
    "frankfurt": "https://frankfurt.mainnet.block-engine.jito.wtf",
    "tokyo": "https://tokyo.mainnet.block-engine.jito.wtf",
}

BUNDLES_PATH = "/api/v1/bundles"


def bundle_endpoint(region: str) -> str:
    """Bundle submission URL for a block engine region."""
    return BLOCK_ENGINES.get(region, BLOCK_ENGINES["mainnet"]) + BUNDLES_PATH


DEFAULT_BLOCK_ENGINE_URL = bundle_endpoint("ny")

VALID_COMMITMENTS = ("processed", "confirmed", "finalized")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


_dotenv_loaded = False


def _ensure_dotenv() -> None:
    """Load .env file exactly once, on first call."""
    global _dotenv_loaded
    if not _dotenv_loaded:
        load_dotenv()
        _dotenv_loaded = True


def _split_urls(raw: str) -> list[str]:
    return [url.strip() for url in raw.split(",") if url.strip()]


def _is_pubkey(value: str) -> bool:
    try:
        Pubkey.from_string(value)
    except ValueError:
        return False
    return True


@dataclass
class BundlerConfig:
    """
    Everything a bundle submission needs to know that isn't a transaction.
    """

    # Ledger RPC
    rpc_url: str = ""

    # Relay endpoints; several clusters can be listed for redundancy
    block_engine_urls: list[str] = field(default_factory=list)

    # Tip
    jito_fee_lamports: int = 0
    tip_accounts: list[str] = field(default_factory=lambda: list(JITO_TIP_ACCOUNTS))

    # Commitment levels
    commitment: str = "confirmed"  # Blockhash for the plain sell path
    setup_commitment: str = "finalized"  # Blockhash when setup instructions ride along
    confirm_commitment: str = "confirmed"

    # Treasury fee (off unless explicitly enabled)
    treasury_mode: bool = False
    treasury_address: str = ""
    treasury_fee_sol: float = 0.0

    # Timeouts
    relay_timeout_seconds: float = 10.0
    rpc_timeout_seconds: float = 15.0
    confirm_timeout_seconds: float = 60.0

    # Behaviour
    max_bundle_transactions: int = 5
    simulate_before_send: bool = True  # Diagnostic only, never blocks a send
    confirm_bundle_signatures: bool = False  # Fee tx alone is trusted by default

    # Logging
    log_level: str = "INFO"
    log_file: str = "pumpbundler.log"

    def __post_init__(self):
        """Fill env-based defaults after dataclass init."""
        _ensure_dotenv()
        if not self.rpc_url:
            self.rpc_url = os.getenv("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com")
        if not self.block_engine_urls:
            self.block_engine_urls = _split_urls(
                os.getenv("BLOCK_ENGINE_URLS", DEFAULT_BLOCK_ENGINE_URL)
            )
        if not self.jito_fee_lamports:
            self.jito_fee_lamports = int(os.getenv("JITO_FEE", "1000000"))
        if not self.treasury_address:
            self.treasury_address = os.getenv("TREASURY_WALLET", "")

    @property
    def treasury_fee_lamports(self) -> int:
        if not self.treasury_mode:
            return 0
        return int(self.treasury_fee_sol * LAMPORTS_PER_SOL)

    def __repr__(self) -> str:
        return (
            f"BundlerConfig(rpc_url='{self.rpc_url[:30]}...', "
            f"endpoints={len(self.block_engine_urls)}, "
            f"jito_fee_lamports={self.jito_fee_lamports}, "
            f"commitment={self.commitment}, "
            f"treasury_mode={self.treasury_mode})"
        )

    def validate(self) -> list[str]:
        """Collect every configuration problem instead of stopping at the first."""
        errors = []

        if not self.rpc_url:
            errors.append("RPC URL required (set SOLANA_RPC_URL)")

        if self.rpc_url and not self.rpc_url.startswith("https://"):
            if not self.rpc_url.startswith("http://127.0.0.1") and not self.rpc_url.startswith(
                "http://localhost"
            ):
                errors.append("RPC URL must use HTTPS")

        if not self.block_engine_urls:
            errors.append("At least one block engine URL is required")

        for url in self.block_engine_urls:
            if not url.startswith("https://") and not url.startswith("http://"):
                errors.append(f"Block engine URL is not http(s): {url}")

        if self.jito_fee_lamports <= 0:
            errors.append("Jito fee must be positive")

        if not self.tip_accounts:
            errors.append("Tip account pool must not be empty")

        for account in self.tip_accounts:
            if not _is_pubkey(account):
                errors.append(f"Tip account is not a valid public key: {account}")

        for name in ("commitment", "setup_commitment", "confirm_commitment"):
            value = getattr(self, name)
            if value not in VALID_COMMITMENTS:
                errors.append(f"{name} must be one of {', '.join(VALID_COMMITMENTS)}")

        if self.treasury_mode:
            if not self.treasury_address:
                errors.append("Treasury address required when treasury_mode=True")
            elif not _is_pubkey(self.treasury_address):
                errors.append(f"Treasury address is not a valid public key: {self.treasury_address}")
            if self.treasury_fee_sol <= 0:
                errors.append("Treasury fee must be positive when treasury_mode=True")

        if not (1 <= self.max_bundle_transactions <= 5):
            errors.append("Bundles hold between 1 and 5 transactions")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}")

        if self.relay_timeout_seconds <= 0 or self.rpc_timeout_seconds <= 0:
            errors.append("Timeouts must be positive")

        return errors

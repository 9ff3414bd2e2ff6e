#!/usr/bin/env python3
"""
PUMPBUNDLER - Custom Exception Hierarchy

Structured error types for bundle construction failures.
Relay and confirmation failures are never raised; they come back as results.
"""


class BundlerError(Exception):
    """Base exception for all PUMPBUNDLER errors."""

    pass


class ConfigError(BundlerError):
    """Invalid or missing configuration."""

    pass


class BundleBuildError(BundlerError):
    """The bundle could not be built; nothing was submitted."""

    pass


class BlockhashFetchError(BundleBuildError):
    """Ledger RPC could not provide a recent blockhash."""

    pass


class SigningError(BundleBuildError):
    """A required signer for the fee transaction is missing."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class SerializationError(BundleBuildError):
    """A transaction is unsigned or malformed and cannot be encoded."""

    pass


class BundleSizeError(BundleBuildError):
    """Bundle exceeds the relay's transaction limit."""

    pass

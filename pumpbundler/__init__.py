"""
PUMPBUNDLER - Atomic Jito Bundle Submission

Build a tip transaction, put it in front of already-signed transactions,
broadcast the bundle to one or more Jito block engines, and report whether
it landed.

Usage:
    from pumpbundler import BundleSubmitter, BundlerConfig

    async with BundleSubmitter(BundlerConfig()) as submitter:
        result = await submitter.submit_sell_bundle([sell_tx], payer)
        if result.confirmed:
            print(result.bundle_id)
"""

__version__ = "1.0.0"

# Submission
from pumpbundler.bundler import BundleSubmitter, SubmissionResult

# Config
from pumpbundler.config import JITO_TIP_ACCOUNTS, BundlerConfig

# Core components
from pumpbundler.core.client import LedgerClient

# Exceptions
from pumpbundler.exceptions import (
    BlockhashFetchError,
    BundleBuildError,
    BundlerError,
    BundleSizeError,
    ConfigError,
    SerializationError,
    SigningError,
)

# Logger
from pumpbundler.logger import BundlerLogger

# Protocol
from pumpbundler.protocol.assembler import AssembledBundle, BundleAssembler
from pumpbundler.protocol.confirmation import ConfirmationChecker
from pumpbundler.protocol.relay import BroadcastReport, EndpointOutcome, RelayBroadcaster
from pumpbundler.protocol.serializer import serialize_bundle, serialize_transaction
from pumpbundler.protocol.tips import select_tip_account

__all__ = [
    # Config
    "BundlerConfig",
    "JITO_TIP_ACCOUNTS",
    # Exceptions
    "BundlerError",
    "ConfigError",
    "BundleBuildError",
    "BlockhashFetchError",
    "SigningError",
    "SerializationError",
    "BundleSizeError",
    # Logger
    "BundlerLogger",
    # Core
    "LedgerClient",
    # Protocol
    "select_tip_account",
    "BundleAssembler",
    "AssembledBundle",
    "serialize_transaction",
    "serialize_bundle",
    "RelayBroadcaster",
    "BroadcastReport",
    "EndpointOutcome",
    "ConfirmationChecker",
    # Submission
    "BundleSubmitter",
    "SubmissionResult",
]

"""
PUMPBUNDLER Protocol - Tip selection, assembly, serialization, relays, confirmation.
"""

from .assembler import AssembledBundle, BundleAssembler, instructions_from_transaction
from .confirmation import ConfirmationChecker
from .relay import BroadcastReport, EndpointOutcome, RelayBroadcaster, send_bundle_payload
from .serializer import (
    deserialize_transaction,
    serialize_bundle,
    serialize_transaction,
    signature_of,
)
from .tips import build_tip_instructions, select_tip_account

__all__ = [
    "select_tip_account",
    "build_tip_instructions",
    "BundleAssembler",
    "AssembledBundle",
    "instructions_from_transaction",
    "serialize_transaction",
    "serialize_bundle",
    "deserialize_transaction",
    "signature_of",
    "RelayBroadcaster",
    "BroadcastReport",
    "EndpointOutcome",
    "send_bundle_payload",
    "ConfirmationChecker",
]

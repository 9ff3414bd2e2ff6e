#!/usr/bin/env python3
"""
PUMPBUNDLER - Bundle Serialization

Signed transactions -> base58 strings for the relay's JSON-RPC body.
Encoding is byte-for-byte: the relay decodes exactly what was signed.
"""

from typing import Sequence

import base58
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from pumpbundler.exceptions import SerializationError

BundleTransaction = VersionedTransaction | Transaction

_PLACEHOLDER_SIGNATURE = Signature.default()


def signature_of(tx: BundleTransaction) -> str:
    """Base58 of the first (fee payer) signature, the transaction's id."""
    try:
        return base58.b58encode(bytes(tx.signatures[0])).decode()
    except (IndexError, AttributeError) as e:
        raise SerializationError("Transaction carries no signature") from e


def _check_signed(tx: BundleTransaction, index: int):
    if not isinstance(tx, (VersionedTransaction, Transaction)):
        raise SerializationError(
            f"Bundle entry {index} is {type(tx).__name__}, not a transaction"
        )

    signatures = list(tx.signatures)
    required = tx.message.header.num_required_signatures
    if len(signatures) != required:
        raise SerializationError(
            f"Bundle entry {index} has {len(signatures)} signatures, message requires {required}"
        )

    unsigned = [i for i, sig in enumerate(signatures) if sig == _PLACEHOLDER_SIGNATURE]
    if unsigned:
        raise SerializationError(f"Bundle entry {index} is not fully signed (slots {unsigned})")

    invalid = [i for i, ok in enumerate(tx.verify_with_results()) if not ok]
    if invalid:
        raise SerializationError(f"Bundle entry {index} has invalid signatures (slots {invalid})")


def serialize_transaction(tx: BundleTransaction, index: int = 0) -> str:
    """Encode one signed transaction as base58 wire bytes."""
    _check_signed(tx, index)
    return base58.b58encode(bytes(tx)).decode()


def serialize_bundle(transactions: Sequence[BundleTransaction]) -> list[str]:
    """Encode every transaction, preserving bundle order."""
    return [serialize_transaction(tx, i) for i, tx in enumerate(transactions)]


def deserialize_transaction(encoded: str) -> VersionedTransaction:
    """Decode a base58 bundle entry back into a transaction."""
    try:
        return VersionedTransaction.from_bytes(base58.b58decode(encoded))
    except Exception as e:
        raise SerializationError(f"Malformed bundle entry: {e}") from e

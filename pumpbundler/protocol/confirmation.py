#!/usr/bin/env python3
"""
PUMPBUNDLER - Bundle Confirmation

A Jito bundle lands all-or-nothing, so the fee transaction's signature
stands in for the whole bundle. Checking every sibling signature is
available through `confirm_bundle_signatures`.
"""

from typing import Optional, Sequence

from pumpbundler.config import BundlerConfig
from pumpbundler.core.client import LedgerClient
from pumpbundler.logger import BundlerLogger


class ConfirmationChecker:
    """Decides whether an accepted bundle actually landed."""

    def __init__(self, client: LedgerClient, config: BundlerConfig, logger: BundlerLogger):
        self.client = client
        self.config = config
        self.logger = logger

    async def check(
        self,
        fee_signature: str,
        last_valid_block_height: Optional[int] = None,
        bundle_signatures: Sequence[str] | None = None,
    ) -> bool:
        """
        Wait for the fee transaction at the confirmation commitment.

        Args:
            fee_signature: Base58 signature of the fee transaction
            last_valid_block_height: Stop waiting once the blockhash expires
            bundle_signatures: Sibling signatures, only checked when
                confirm_bundle_signatures is enabled

        Returns:
            True only if the ledger confirmed the fee transaction without error
        """
        landed = await self.client.confirm_transaction(
            fee_signature,
            self.config.confirm_commitment,
            last_valid_block_height=last_valid_block_height,
        )
        if not landed:
            return False

        if self.config.confirm_bundle_signatures and bundle_signatures:
            return await self._siblings_landed(bundle_signatures)
        return True

    async def _siblings_landed(self, signatures: Sequence[str]) -> bool:
        statuses = await self.client.get_signature_statuses(list(signatures))
        if not statuses or len(statuses) != len(signatures):
            self.logger.warning("Sibling signature statuses unavailable")
            return False

        for signature, status in zip(signatures, statuses):
            if status is None or status.err is not None:
                self.logger.warning(f"Bundle member not landed: {signature[:16]}...")
                return False
        return True

#!/usr/bin/env python3
"""
PUMPBUNDLER - Ledger Client

The handful of Solana RPC calls a bundle submission needs:
blockhash, simulation, confirmation and signature status lookups.
"""

import asyncio
from typing import List, Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solders.rpc.responses import RpcBlockhash
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from pumpbundler.config import BundlerConfig
from pumpbundler.exceptions import BlockhashFetchError
from pumpbundler.logger import BundlerLogger


class LedgerClient:
    """
    Every call is bounded by `rpc_timeout_seconds`; only the blockhash fetch
    raises, the rest report failure through their return value.
    """

    def __init__(self, config: BundlerConfig, logger: BundlerLogger, client: AsyncClient = None):
        self.config = config
        self.logger = logger
        self.client = client or AsyncClient(config.rpc_url)
        self.timeout = config.rpc_timeout_seconds

    async def get_latest_blockhash(self, commitment: str) -> RpcBlockhash:
        """Fetch a recent blockhash (and its last valid block height)."""
        try:
            response = await asyncio.wait_for(
                self.client.get_latest_blockhash(commitment=Commitment(commitment)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise BlockhashFetchError(f"RPC timeout: get_latest_blockhash ({commitment})") from e
        except Exception as e:
            raise BlockhashFetchError(f"Failed to fetch latest blockhash: {e}") from e

        if response.value is None:
            raise BlockhashFetchError("RPC returned no blockhash")
        return response.value

    async def simulate_transaction(
        self, transaction: VersionedTransaction, sig_verify: bool = False
    ) -> tuple[bool, Optional[str]]:
        """
        Dry-run a transaction.
        Returns (ok, detail) where detail is the error or the last log line.
        """
        try:
            response = await asyncio.wait_for(
                self.client.simulate_transaction(transaction, sig_verify=sig_verify),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return False, "RPC timeout: simulate_transaction"
        except Exception as e:
            return False, f"Simulation error: {e}"

        if response.value.err:
            return False, str(response.value.err)
        logs = response.value.logs or []
        return True, logs[-1] if logs else None

    async def confirm_transaction(
        self,
        signature: str,
        commitment: str,
        last_valid_block_height: Optional[int] = None,
    ) -> Optional[bool]:
        """
        Wait until the ledger reports the signature at `commitment`.
        True on success, False if it landed with an error, None if unknown.
        """
        try:
            response = await asyncio.wait_for(
                self.client.confirm_transaction(
                    Signature.from_string(signature),
                    Commitment(commitment),
                    last_valid_block_height=last_valid_block_height,
                ),
                timeout=self.config.confirm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.logger.warning(f"Confirmation timeout: {signature[:16]}...")
            return None
        except Exception as e:
            self.logger.error(f"Confirmation failed for {signature[:16]}...", e)
            return None

        statuses = response.value
        if not statuses or statuses[0] is None:
            return None
        return statuses[0].err is None

    async def get_signature_statuses(self, signatures: List[str]) -> Optional[List]:
        """Check confirmation status of transaction signatures."""
        try:
            sigs = [Signature.from_string(s) for s in signatures]
            response = await asyncio.wait_for(
                self.client.get_signature_statuses(sigs),
                timeout=self.timeout,
            )
            return response.value if response.value else None
        except asyncio.TimeoutError:
            self.logger.warning("RPC timeout: get_signature_statuses")
            return None
        except Exception as e:
            self.logger.error("Failed to fetch signature statuses", e)
            return None

    async def close(self):
        await self.client.close()

#!/usr/bin/env python3
"""
PUMPBUNDLER - Bundle Submission

The one submission flow behind both entry points:

    blockhash -> fee tx + ordering -> base58 -> (simulate) -> relays -> confirm

Only a bundle that cannot be built raises. Anything that goes wrong from
the broadcast onward comes back as an unconfirmed SubmissionResult.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.transaction import Transaction, VersionedTransaction

from pumpbundler.config import BundlerConfig
from pumpbundler.core.client import LedgerClient
from pumpbundler.exceptions import BlockhashFetchError, ConfigError
from pumpbundler.logger import BundlerLogger
from pumpbundler.protocol.assembler import (
    AssembledBundle,
    BundleAssembler,
    instructions_from_transaction,
)
from pumpbundler.protocol.confirmation import ConfirmationChecker
from pumpbundler.protocol.relay import RelayBroadcaster
from pumpbundler.protocol.serializer import serialize_bundle


@dataclass
class SubmissionResult:
    """Outcome of one bundle submission."""

    confirmed: bool
    fee_tx_signature: Optional[str] = None
    bundle_id: Optional[str] = None

    def as_dict(self) -> dict:
        """Wire shape: absent values are omitted rather than null."""
        result = {"confirmed": self.confirmed}
        if self.fee_tx_signature is not None:
            result["feeTxSignature"] = self.fee_tx_signature
        if self.bundle_id is not None:
            result["bundleId"] = self.bundle_id
        return result


class BundleSubmitter:
    """
    Submits atomic bundles to Jito block engines.

    Usage:
        async with BundleSubmitter(BundlerConfig()) as submitter:
            result = await submitter.submit_sell_bundle([sell_tx], payer)
    """

    def __init__(
        self,
        config: BundlerConfig,
        client: LedgerClient | None = None,
        relay: RelayBroadcaster | None = None,
        logger: BundlerLogger | None = None,
    ):
        self.config = config
        self.logger = logger or BundlerLogger(config)

        errors = config.validate()
        if errors:
            for error in errors:
                self.logger.error("Configuration error", Exception(error))
            raise ConfigError("Invalid configuration: " + "; ".join(errors))

        self.client = client or LedgerClient(config, self.logger)
        self.relay = relay or RelayBroadcaster(config, self.logger)
        self.assembler = BundleAssembler(config, self.logger)
        self.confirmation = ConfirmationChecker(self.client, config, self.logger)

    async def initialize(self):
        await self.relay.initialize()

    async def close(self):
        await self.relay.close()
        await self.client.close()

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def submit_sell_bundle(
        self, transactions: Sequence[VersionedTransaction], payer: Keypair
    ) -> SubmissionResult:
        """
        Tip + the caller's already-signed transactions.

        Args:
            transactions: Signed transactions, executed in this order after the tip
            payer: Pays the tip and signs the fee transaction

        Returns:
            SubmissionResult
        """
        return await self._submit(
            transactions,
            payer,
            commitment=self.config.commitment,
            sig_verify=False,
        )

    async def submit_bundle_with_setup(
        self,
        setup_instructions: Sequence[Instruction] | Transaction,
        signers: Iterable[Keypair],
        transactions: Sequence[VersionedTransaction],
        payer: Keypair,
    ) -> SubmissionResult:
        """
        Tip + setup instructions in one fee transaction, then the caller's
        transactions. The blockhash is taken at `setup_commitment` so the
        setup can't be reorganized away from under the rest of the bundle.

        Args:
            setup_instructions: Instructions (or an unsent legacy transaction)
                to prepend into the fee transaction
            signers: Authorities the setup instructions need (payer implied)
            transactions: Signed transactions, executed in order after the fee tx
            payer: Pays the tip and signs the fee transaction

        Returns:
            SubmissionResult
        """
        if isinstance(setup_instructions, Transaction):
            setup_instructions = instructions_from_transaction(setup_instructions)

        return await self._submit(
            transactions,
            payer,
            commitment=self.config.setup_commitment,
            sig_verify=True,
            extra_instructions=list(setup_instructions),
            signers=list(signers),
        )

    async def bundle_status(self, bundle_id: str) -> dict:
        """Ask the first block engine how a submitted bundle is doing."""
        return await self.relay.get_bundle_status(bundle_id)

    async def _submit(
        self,
        transactions: Sequence[VersionedTransaction],
        payer: Keypair,
        commitment: str,
        sig_verify: bool,
        extra_instructions: Sequence[Instruction] | None = None,
        signers: Sequence[Keypair] | None = None,
    ) -> SubmissionResult:
        self.logger.info(f"Starting Jito bundle... tx count: {len(transactions)}")

        # Oversized bundles and missing authorities fail here, before any network call
        self.assembler.check_size(len(transactions))
        self.assembler.check_signers(payer, extra_instructions, signers)

        try:
            blockhash = await self.client.get_latest_blockhash(commitment)
        except BlockhashFetchError as e:
            self.logger.error("Bundle not built", e)
            return SubmissionResult(confirmed=False)

        bundle = self.assembler.assemble(
            payer,
            blockhash.blockhash,
            transactions,
            extra_instructions=extra_instructions,
            signers=signers,
        )
        serialized = serialize_bundle(bundle.transactions_in_order)
        fee_signature = bundle.fee_signature

        if self.config.simulate_before_send:
            await self._simulate(bundle, sig_verify)

        report = await self.relay.broadcast(serialized)
        if not report.accepted:
            return SubmissionResult(confirmed=False)

        confirmed = await self.confirmation.check(
            fee_signature,
            last_valid_block_height=blockhash.last_valid_block_height,
            bundle_signatures=bundle.signatures[1:],
        )
        self.logger.bundle_confirmation(fee_signature, report.bundle_id, confirmed)

        return SubmissionResult(
            confirmed=confirmed,
            fee_tx_signature=fee_signature,
            bundle_id=report.bundle_id,
        )

    async def _simulate(self, bundle: AssembledBundle, sig_verify: bool):
        """Diagnostic dry run of each member; results are logged, never acted on."""
        for index, (tx, signature) in enumerate(
            zip(bundle.transactions_in_order, bundle.signatures)
        ):
            try:
                ok, detail = await self.client.simulate_transaction(tx, sig_verify=sig_verify)
            except Exception as e:
                ok, detail = False, f"Simulation error: {e}"
            self.logger.simulation_result(index, signature, ok, detail)

#!/usr/bin/env python3
"""
PUMPBUNDLER - Bundle Assembly

Builds the leading fee transaction and orders the bundle.

Bundle layout:
    [0]    fee transaction: tip transfer, optional treasury transfer,
           then any prepended setup instructions
    [1..]  caller transactions, in the order given

The relay executes members in order and drops the whole bundle if any
member fails, so the fee only gets paid when everything lands.
"""

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import Message, MessageV0
from solders.pubkey import Pubkey
from solders.transaction import Transaction, VersionedTransaction

from pumpbundler.config import BundlerConfig
from pumpbundler.exceptions import BundleSizeError, SigningError
from pumpbundler.logger import BundlerLogger
from pumpbundler.protocol.serializer import signature_of
from pumpbundler.protocol.tips import build_tip_instructions, select_tip_account


@dataclass
class AssembledBundle:
    """An ordered, fully signed bundle ready for serialization."""

    fee_transaction: VersionedTransaction
    transactions: list[VersionedTransaction] = field(default_factory=list)
    tip_account: Pubkey | None = None

    @property
    def transactions_in_order(self) -> list[VersionedTransaction]:
        return [self.fee_transaction, *self.transactions]

    @property
    def fee_signature(self) -> str:
        return signature_of(self.fee_transaction)

    @property
    def signatures(self) -> list[str]:
        return [signature_of(tx) for tx in self.transactions_in_order]

    def __len__(self) -> int:
        return 1 + len(self.transactions)


def instructions_from_transaction(tx: Transaction) -> list[Instruction]:
    """
    Recover the instructions of a built (legacy) transaction so they can be
    prepended to the fee transaction.
    """
    message = tx.message
    if not isinstance(message, Message):
        raise ValueError("Only legacy messages can be decompiled into instructions")

    keys = message.account_keys
    header = message.header
    signed = header.num_required_signatures
    writable_signed = signed - header.num_readonly_signed_accounts
    writable_unsigned_end = len(keys) - header.num_readonly_unsigned_accounts

    def is_writable(index: int) -> bool:
        return index < writable_signed or signed <= index < writable_unsigned_end

    instructions = []
    for compiled in message.instructions:
        accounts = [
            AccountMeta(
                pubkey=keys[index],
                is_signer=index < signed,
                is_writable=is_writable(index),
            )
            for index in compiled.accounts
        ]
        instructions.append(
            Instruction(
                program_id=keys[compiled.program_id_index],
                data=bytes(compiled.data),
                accounts=accounts,
            )
        )
    return instructions


def _unique_signers(payer: Keypair, signers: Iterable[Keypair] | None) -> dict[Pubkey, Keypair]:
    by_pubkey = {payer.pubkey(): payer}
    for signer in signers or ():
        by_pubkey.setdefault(signer.pubkey(), signer)
    return by_pubkey


class BundleAssembler:
    """
    Turns (payer, blockhash, transactions, extra instructions) into a signed
    bundle. Pure: no network calls happen here.
    """

    def __init__(self, config: BundlerConfig, logger: BundlerLogger):
        self.config = config
        self.logger = logger
        self.treasury = (
            Pubkey.from_string(config.treasury_address)
            if config.treasury_mode and config.treasury_address
            else None
        )

    def _fee_instructions(
        self, payer: Pubkey, tip_account: Pubkey, extra_instructions: Sequence[Instruction]
    ) -> list[Instruction]:
        instructions = build_tip_instructions(
            payer,
            tip_account,
            self.config.jito_fee_lamports,
            treasury=self.treasury,
            treasury_lamports=self.config.treasury_fee_lamports,
        )
        instructions.extend(extra_instructions)
        return instructions

    def _required_signers(
        self, message: MessageV0, available: dict[Pubkey, Keypair]
    ) -> list[Keypair]:
        required = message.account_keys[: message.header.num_required_signatures]
        missing = [str(key) for key in required if key not in available]
        if missing:
            raise SigningError(
                f"Fee transaction is missing {len(missing)} required signer(s): "
                + ", ".join(missing),
                missing=missing,
            )
        return [available[key] for key in required]

    def check_size(self, count: int):
        """Raise BundleSizeError if the fee tx plus `count` caller txs will not fit."""
        size = 1 + count
        if size > self.config.max_bundle_transactions:
            raise BundleSizeError(
                f"Bundle of {size} transactions exceeds the limit of "
                f"{self.config.max_bundle_transactions}"
            )

    def check_signers(
        self,
        payer: Keypair,
        extra_instructions: Sequence[Instruction] | None = None,
        signers: Iterable[Keypair] | None = None,
    ):
        """Raise SigningError now rather than after a blockhash round trip."""
        payer_key = payer.pubkey()
        # Any tip account works here; only the signer set matters
        instructions = self._fee_instructions(
            payer_key, Pubkey.from_string(self.config.tip_accounts[0]), extra_instructions or []
        )
        message = MessageV0.try_compile(payer_key, instructions, [], Hash.default())
        self._required_signers(message, _unique_signers(payer, signers))

    def assemble(
        self,
        payer: Keypair,
        recent_blockhash: Hash,
        transactions: Sequence[VersionedTransaction],
        extra_instructions: Sequence[Instruction] | None = None,
        signers: Iterable[Keypair] | None = None,
    ) -> AssembledBundle:
        """
        Build, sign, and order the bundle.

        Args:
            payer: Fee payer; always signs the fee transaction
            recent_blockhash: Blockhash for the fee transaction
            transactions: Caller transactions, already signed
            extra_instructions: Instructions to prepend into the fee transaction
            signers: Additional authorities those instructions need

        Returns:
            AssembledBundle with the fee transaction first
        """
        self.check_size(len(transactions))
        size = 1 + len(transactions)

        payer_key = payer.pubkey()
        tip_account = select_tip_account(self.config.tip_accounts)
        instructions = self._fee_instructions(payer_key, tip_account, extra_instructions or [])

        message = MessageV0.try_compile(payer_key, instructions, [], recent_blockhash)
        keypairs = self._required_signers(message, _unique_signers(payer, signers))
        fee_tx = VersionedTransaction(message, keypairs)

        self.logger.tip_paid(str(tip_account), self.config.jito_fee_lamports, size)

        return AssembledBundle(
            fee_transaction=fee_tx,
            transactions=list(transactions),
            tip_account=tip_account,
        )

#!/usr/bin/env python3
"""
PUMPBUNDLER - Tip Selection

Jito block engines only prioritise bundles that pay one of their tip
accounts. Picking the account at random spreads write-lock contention.
"""

import random
from typing import Sequence

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer

from pumpbundler.config import JITO_TIP_ACCOUNTS


def select_tip_account(pool: Sequence[str] = JITO_TIP_ACCOUNTS, rng=random) -> Pubkey:
    """Pick one tip account uniformly at random. No state between calls."""
    if not pool:
        raise ValueError("Tip account pool is empty")
    return Pubkey.from_string(rng.choice(pool))


def build_tip_instructions(
    payer: Pubkey,
    tip_account: Pubkey,
    tip_lamports: int,
    treasury: Pubkey | None = None,
    treasury_lamports: int = 0,
) -> list[Instruction]:
    """
    Transfer instructions that lead the fee transaction.

    Args:
        payer: Account paying the tip
        tip_account: Relay tip account (see select_tip_account)
        tip_lamports: Tip amount
        treasury: Optional treasury account
        treasury_lamports: Treasury fee; skipped when zero

    Returns:
        [tip transfer] or [tip transfer, treasury transfer]
    """
    instructions = [
        transfer(TransferParams(from_pubkey=payer, to_pubkey=tip_account, lamports=tip_lamports))
    ]

    if treasury is not None and treasury_lamports > 0:
        instructions.append(
            transfer(
                TransferParams(from_pubkey=payer, to_pubkey=treasury, lamports=treasury_lamports)
            )
        )

    return instructions

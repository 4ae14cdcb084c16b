"""Instruction factories for the System, SPL Token and Associated Token programs."""

from __future__ import annotations

import struct
from typing import Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import TransferParams, transfer
from solders.token import ID as TOKEN_PROGRAM_ID
from solders.token.associated import get_associated_token_address as _derive_associated_token_address

from .keys import KeyLike, as_public_key

ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

# Instruction discriminators
SYSTEM_TRANSFER = 2
TOKEN_TRANSFER = 3
ATA_CREATE_IDEMPOTENT = 1

U64_MAX = 2**64 - 1


def _check_u64(value: int, label: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{label} must be an integer amount of smallest units")
    if value < 0 or value > U64_MAX:
        raise ValueError(f"{label} out of u64 range: {value}")
    return value


def system_transfer(from_pubkey: KeyLike, to_pubkey: KeyLike, lamports: int) -> Instruction:
    return transfer(
        TransferParams(
            from_pubkey=as_public_key(from_pubkey),
            to_pubkey=as_public_key(to_pubkey),
            lamports=_check_u64(lamports, "lamports"),
        )
    )


def token_transfer(
    source: KeyLike,
    destination: KeyLike,
    owner: KeyLike,
    amount: int,
    *,
    program_id: KeyLike = TOKEN_PROGRAM_ID,
) -> Instruction:
    amount = _check_u64(amount, "amount")
    return Instruction(
        as_public_key(program_id),
        struct.pack("<BQ", TOKEN_TRANSFER, amount),
        [
            AccountMeta(as_public_key(source), is_signer=False, is_writable=True),
            AccountMeta(as_public_key(destination), is_signer=False, is_writable=True),
            AccountMeta(as_public_key(owner), is_signer=True, is_writable=False),
        ],
    )


def get_associated_token_address(
    owner: KeyLike,
    mint: KeyLike,
    *,
    token_program_id: KeyLike = TOKEN_PROGRAM_ID,
) -> Pubkey:
    return _derive_associated_token_address(
        as_public_key(owner),
        as_public_key(mint),
        as_public_key(token_program_id),
    )


def create_associated_token_account_idempotent(
    payer: KeyLike,
    associated_token: KeyLike,
    owner: KeyLike,
    mint: KeyLike,
    *,
    token_program_id: KeyLike = TOKEN_PROGRAM_ID,
) -> Instruction:
    """Create ``associated_token`` unless it already exists; never fails on an existing account."""

    return Instruction(
        ASSOCIATED_TOKEN_PROGRAM_ID,
        bytes([ATA_CREATE_IDEMPOTENT]),
        [
            AccountMeta(as_public_key(payer), is_signer=True, is_writable=True),
            AccountMeta(as_public_key(associated_token), is_signer=False, is_writable=True),
            AccountMeta(as_public_key(owner), is_signer=False, is_writable=False),
            AccountMeta(as_public_key(mint), is_signer=False, is_writable=False),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(as_public_key(token_program_id), is_signer=False, is_writable=False),
        ],
    )


def decode_system_transfer(data: bytes) -> Optional[int]:
    """Return the lamports of a System ``Transfer`` payload, or None for other instructions."""

    if len(data) != 12:
        return None
    tag, lamports = struct.unpack("<IQ", data)
    return lamports if tag == SYSTEM_TRANSFER else None


def decode_token_transfer(data: bytes) -> Optional[int]:
    if len(data) != 9 or data[0] != TOKEN_TRANSFER:
        return None
    (amount,) = struct.unpack("<Q", data[1:])
    return amount

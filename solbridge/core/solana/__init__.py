"""
Solana wire helpers used to build unsigned bridge transactions, on top of solders.

Usage:
    from solbridge.core.solana import build_unsigned, encode_transaction, system_transfer

    tx = build_unsigned(payer, [system_transfer(payer, vault, 1_000)], blockhash)
    payload = encode_transaction(tx, require_all_signatures=False)
"""

from .base58 import b58decode, b58encode
from .instructions import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    create_associated_token_account_idempotent,
    decode_system_transfer,
    decode_token_transfer,
    get_associated_token_address,
    system_transfer,
    token_transfer,
)
from .keys import as_public_key, is_valid_public_key, parse_public_key
from .transaction import (
    build_unsigned,
    decode_transaction,
    encode_transaction,
    instruction_accounts,
    program_id_of,
    signature_slots,
    signers,
    verified_signers,
)

__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "SYSTEM_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "as_public_key",
    "b58decode",
    "b58encode",
    "build_unsigned",
    "create_associated_token_account_idempotent",
    "decode_system_transfer",
    "decode_token_transfer",
    "decode_transaction",
    "encode_transaction",
    "get_associated_token_address",
    "instruction_accounts",
    "is_valid_public_key",
    "parse_public_key",
    "program_id_of",
    "signature_slots",
    "signers",
    "system_transfer",
    "token_transfer",
    "verified_signers",
]

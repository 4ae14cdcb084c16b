"""
Unsigned transactions for wallets, and decoding of what they submitted.

Building compiles a legacy ``solders`` message and leaves one zeroed 64-byte
slot per required signer so the wallet can sign in place. Decoding accepts
both legacy and v0 transactions as returned by ``getTransaction``.
"""

from __future__ import annotations

import base64
import binascii
from typing import List, Optional, Sequence, Union

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey
from solders.errors import BincodeError
from solders.hash import Hash
from solders.instruction import CompiledInstruction, Instruction
from solders.message import Message, MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from .base58 import b58decode
from .keys import KeyLike, as_public_key

BLOCKHASH_LENGTH = 32
PACKET_DATA_SIZE = 1232
EMPTY_SIGNATURE = Signature.default()

AnyTransaction = Union[Transaction, VersionedTransaction]
AnyMessage = Union[Message, MessageV0]


def build_unsigned(
    fee_payer: KeyLike,
    instructions: Sequence[Instruction],
    recent_blockhash: str,
) -> Transaction:
    if not instructions:
        raise ValueError("A transaction needs at least one instruction")
    blockhash = b58decode(recent_blockhash)
    if len(blockhash) != BLOCKHASH_LENGTH:
        raise ValueError("Recent blockhash must decode to 32 bytes")
    message = Message.new_with_blockhash(list(instructions), as_public_key(fee_payer), Hash(blockhash))
    return Transaction.new_unsigned(message)


def encode_transaction(transaction: AnyTransaction, *, require_all_signatures: bool = True) -> str:
    if require_all_signatures:
        slots = zip(signers(transaction.message), signature_slots(transaction))
        missing = [str(key) for key, signature in slots if signature is None]
        if missing:
            raise ValueError(f"Missing signature for: {', '.join(missing)}")
    raw = bytes(transaction)
    if len(raw) > PACKET_DATA_SIZE:
        raise ValueError(f"Transaction too large: {len(raw)} > {PACKET_DATA_SIZE} bytes")
    return base64.b64encode(raw).decode("ascii")


def decode_transaction(value: str) -> VersionedTransaction:
    """Parse a base64 wire transaction; any malformed input raises ValueError."""

    try:
        raw = base64.b64decode(value, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise ValueError("Transaction is not valid base64") from exc
    try:
        return VersionedTransaction.from_bytes(raw)
    except (BincodeError, ValueError) as exc:
        raise ValueError(f"Transaction bytes could not be decoded: {exc}") from exc


def signers(message: AnyMessage) -> List[Pubkey]:
    return list(message.account_keys[: message.header.num_required_signatures])


def signature_slots(transaction: AnyTransaction) -> List[Optional[Signature]]:
    """Signatures in signer order; unfilled slots are None."""

    return [None if signature == EMPTY_SIGNATURE else signature for signature in transaction.signatures]


def program_id_of(message: AnyMessage, instruction: CompiledInstruction) -> Pubkey:
    return message.account_keys[instruction.program_id_index]


def instruction_accounts(message: AnyMessage, instruction: CompiledInstruction) -> List[Optional[Pubkey]]:
    keys = message.account_keys
    # Indices past the static keys point into address lookup tables (v0 only).
    return [keys[position] if position < len(keys) else None for position in bytes(instruction.accounts)]


def verified_signers(transaction: AnyTransaction) -> List[Pubkey]:
    """Signers whose slot holds a valid ed25519 signature over the message."""

    payload = to_bytes_versioned(transaction.message)
    verified: List[Pubkey] = []
    for key, signature in zip(signers(transaction.message), signature_slots(transaction)):
        if signature is None:
            continue
        try:
            VerifyKey(bytes(key)).verify(payload, bytes(signature))
        except BadSignatureError:
            continue
        verified.append(key)
    return verified

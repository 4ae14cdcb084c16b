"""
Solana account addresses.

Addresses are ``solders.pubkey.Pubkey`` values throughout the engine. Caller
input is decoded here first, so malformed base58 and wrong lengths surface as
ValueError before anything reaches solders.
"""

from __future__ import annotations

from typing import Union

from solders.pubkey import Pubkey

from .base58 import b58decode

PUBLIC_KEY_LENGTH = 32

KeyLike = Union[Pubkey, str]


def parse_public_key(value: str) -> Pubkey:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Public key is empty")
    raw = b58decode(value.strip())
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise ValueError(f"Invalid public key length: {len(raw)}")
    return Pubkey(raw)


def as_public_key(value: KeyLike) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    return parse_public_key(value)


def is_valid_public_key(value: str) -> bool:
    try:
        parse_public_key(value)
    except ValueError:
        return False
    return True

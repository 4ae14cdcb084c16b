"""Bitcoin-alphabet base58, as used for Solana keys, hashes and signatures."""

from __future__ import annotations

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {char: index for index, char in enumerate(_BASE58_ALPHABET)}


def b58decode(value: str) -> bytes:
    if not value:
        return b""
    num = 0
    for char in value:
        if char not in _BASE58_INDEX:
            raise ValueError("Invalid base58 character")
        num = num * 58 + _BASE58_INDEX[char]
    combined = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    pad = len(value) - len(value.lstrip("1"))
    return b"\x00" * pad + combined


def b58encode(data: bytes) -> str:
    if not data:
        return ""
    num = int.from_bytes(data, "big")
    encoded = ""
    while num > 0:
        num, rem = divmod(num, 58)
        encoded = _BASE58_ALPHABET[rem] + encoded
    pad = 0
    for byte in data:
        if byte == 0:
            pad += 1
        else:
            break
    return "1" * pad + encoded

"""Constants and metadata for Solana -> Base bridging."""

from __future__ import annotations

from enum import Enum
from typing import Dict


class BridgeableToken(str, Enum):
    """Assets the engine knows how to move."""

    NATIVE = "NATIVE"
    STABLE = "STABLE"

    @classmethod
    def parse(cls, value: "BridgeableToken | str") -> "BridgeableToken":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        key = TOKEN_ALIASES.get(key, key)
        return cls(key)

    @property
    def decimals(self) -> int:
        return TOKEN_DECIMALS[self]

    @property
    def symbol(self) -> str:
        return TOKEN_SYMBOLS[self]

    @property
    def is_native(self) -> bool:
        return self is BridgeableToken.NATIVE


TOKEN_ALIASES: Dict[str, str] = {
    "SOL": "NATIVE",
    "USDC": "STABLE",
}

TOKEN_DECIMALS: Dict[BridgeableToken, int] = {
    BridgeableToken.NATIVE: 9,
    BridgeableToken.STABLE: 6,
}

TOKEN_SYMBOLS: Dict[BridgeableToken, str] = {
    BridgeableToken.NATIVE: "SOL",
    BridgeableToken.STABLE: "USDC",
}

# Auto-relay fee, always charged in SOL (~$0.20).
AUTO_RELAY_FEE_LAMPORTS = 1_000_000
# Disclosed only; paid by the relayer on Base.
DESTINATION_GAS_FEE = "0.0001"

ESTIMATED_BRIDGE_SECONDS = 30
ESTIMATED_BRIDGE_TIME = "~30 seconds"

CORRELATION_ID_PREFIX = "bridge"
CORRELATION_SUFFIX_LENGTH = 6

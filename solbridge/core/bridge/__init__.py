"""Solana -> Base bridging engine."""

from typing import TYPE_CHECKING

from .constants import BridgeableToken
from .errors import (
    BridgeError,
    BridgeInputError,
    ConfigurationError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidSignatureError,
    NetworkUnavailableError,
    UnsupportedTokenError,
)
from .models import (
    BalanceSnapshot,
    BuiltTransfer,
    FundsCheck,
    Quote,
    TransferRequest,
    TransferState,
    TransferStatus,
)

if TYPE_CHECKING:  # pragma: no cover
    from .service import BridgeService

__all__ = [
    "BalanceSnapshot",
    "BridgeError",
    "BridgeInputError",
    "BridgeService",
    "BridgeableToken",
    "BuiltTransfer",
    "ConfigurationError",
    "FundsCheck",
    "InvalidAddressError",
    "InvalidAmountError",
    "InvalidSignatureError",
    "NetworkUnavailableError",
    "Quote",
    "TransferRequest",
    "TransferState",
    "TransferStatus",
    "UnsupportedTokenError",
]


def __getattr__(name: str):  # pragma: no cover - simple thunk
    # Lazy: the service pulls in the RPC providers, which import this package's errors.
    if name == "BridgeService":
        from .service import BridgeService as _BridgeService

        return _BridgeService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

"""Exception taxonomy for the bridging engine."""

from __future__ import annotations

from typing import Optional


class BridgeError(Exception):
    """Base exception for bridge errors."""

    retryable: bool = False


class ConfigurationError(BridgeError):
    """The active network profile is incomplete. Fatal, raised at startup."""
    pass


class BridgeInputError(BridgeError):
    """Caller input was rejected before any network call."""
    pass


class InvalidAddressError(BridgeInputError):
    pass


class InvalidAmountError(BridgeInputError):
    pass


class InvalidSignatureError(BridgeInputError):
    pass


class UnsupportedTokenError(BridgeInputError):
    pass


class NetworkUnavailableError(BridgeError):
    """Transient RPC/indexer failure. Re-poll with backoff, never treat as a failed transfer."""

    retryable = True

    def __init__(self, message: str, *, method: Optional[str] = None):
        super().__init__(message)
        self.method = method

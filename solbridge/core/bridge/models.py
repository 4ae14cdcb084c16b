"""Typed models used by the bridge subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from .amounts import format_amount
from .constants import BridgeableToken


@dataclass(frozen=True)
class Quote:
    token: BridgeableToken
    requested_amount: Decimal
    estimated_receive_amount: Decimal
    relay_fee: Decimal
    destination_gas_fee: Decimal
    estimated_settlement_time: str
    estimated_settlement_seconds: int
    destination_token_address: str
    requested_units: int
    receive_units: int
    relay_fee_units: int
    relay_fee_token: BridgeableToken = BridgeableToken.NATIVE

    @property
    def fee_in_same_asset(self) -> bool:
        return self.relay_fee_token is self.token

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token.value,
            "amount": format_amount(self.requested_amount),
            "estimatedReceiveAmount": format_amount(self.estimated_receive_amount),
            "relayFee": format_amount(self.relay_fee),
            "relayFeeToken": self.relay_fee_token.value,
            "gasFee": format_amount(self.destination_gas_fee),
            "estimatedTime": self.estimated_settlement_time,
            "estimatedSeconds": self.estimated_settlement_seconds,
            "baseAddress": self.destination_token_address,
        }


@dataclass(frozen=True)
class TransferRequest:
    source_address: str
    destination_address: str
    token: BridgeableToken
    amount: Decimal


@dataclass(frozen=True)
class BuiltTransfer:
    serialized_transaction: str
    correlation_id: str
    estimated_arrival: str
    instructions: str
    recent_blockhash: str
    last_valid_block_height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serializedTransaction": self.serialized_transaction,
            "bridgeId": self.correlation_id,
            "estimatedArrival": self.estimated_arrival,
            "instructions": self.instructions,
            "recentBlockhash": self.recent_blockhash,
            "lastValidBlockHeight": self.last_valid_block_height,
        }


class TransferState(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferState.COMPLETED, TransferState.FAILED)

    @property
    def rank(self) -> int:
        return _STATE_RANK[self]


_STATE_RANK = {
    TransferState.PENDING: 0,
    TransferState.VALIDATING: 1,
    TransferState.EXECUTING: 2,
    TransferState.COMPLETED: 3,
    TransferState.FAILED: 3,
}


@dataclass(frozen=True)
class TransferStatus:
    correlation_id: str
    state: TransferState
    source_signature: Optional[str] = None
    destination_transaction_hash: Optional[str] = None
    amount: Optional[Decimal] = None
    token: Optional[BridgeableToken] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "bridgeId": self.correlation_id,
            "status": self.state.value,
            "amount": format_amount(self.amount) if self.amount is not None else None,
            "token": self.token.value if self.token is not None else None,
        }
        if self.source_signature:
            payload["solanaSignature"] = self.source_signature
        if self.destination_transaction_hash:
            payload["baseTransactionHash"] = self.destination_transaction_hash
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class BalanceSnapshot:
    address: str
    native: Decimal
    tokens: Dict[BridgeableToken, Decimal] = field(default_factory=dict)
    native_units: int = 0
    token_units: Dict[BridgeableToken, int] = field(default_factory=dict)

    def units_of(self, token: BridgeableToken) -> int:
        if token.is_native:
            return self.native_units
        return self.token_units.get(token, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "native": format_amount(self.native),
            "tokens": {token.value: format_amount(amount) for token, amount in self.tokens.items()},
        }


@dataclass(frozen=True)
class FundsCheck:
    """Whether a balance snapshot covers a transfer plus its relay fee."""

    sufficient: bool
    required_native_units: int
    available_native_units: int
    required_token_units: int = 0
    available_token_units: int = 0
    shortfall: Optional[str] = None

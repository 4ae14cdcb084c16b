"""Fee- and decimal-aware bridge quotes. Pure: no I/O."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from .amounts import AmountLike, from_units, to_units
from .constants import (
    AUTO_RELAY_FEE_LAMPORTS,
    BridgeableToken,
    DESTINATION_GAS_FEE,
    ESTIMATED_BRIDGE_SECONDS,
    ESTIMATED_BRIDGE_TIME,
)
from .errors import InvalidAmountError, UnsupportedTokenError
from .models import Quote
from .network import NetworkProfile, TokenDeployment


def resolve_token(profile: NetworkProfile, token: "BridgeableToken | str") -> TokenDeployment:
    """Map ``token`` to its deployment, or raise UnsupportedTokenError."""

    try:
        parsed = BridgeableToken.parse(token)
    except ValueError as exc:
        supported = ", ".join(t.symbol for t in profile.tokens)
        raise UnsupportedTokenError(f"Unsupported token: {token}. Supported tokens: {supported}") from exc
    deployment = profile.deployment(parsed)
    if deployment is None or not deployment.destination_token:
        raise UnsupportedTokenError(
            f"{parsed.symbol} has no destination mapping on {profile.destination_chain} ({profile.environment.value})"
        )
    return deployment


def require_above_relay_fee(deployment: TokenDeployment, units: int, fee_units: int) -> None:
    """Reject SOL principals that do not exceed the SOL relay fee."""

    if deployment.token is BridgeableToken.NATIVE and units <= fee_units:
        native = BridgeableToken.NATIVE
        raise InvalidAmountError(
            f"Amount must exceed the relay fee of {from_units(fee_units, native.decimals)} {native.symbol}"
        )


class QuoteEngine:
    """Computes what arrives on the destination ledger for a given amount."""

    def __init__(
        self,
        profile: NetworkProfile,
        *,
        relay_fee_lamports: int = AUTO_RELAY_FEE_LAMPORTS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._profile = profile
        self._relay_fee_lamports = relay_fee_lamports
        self._logger = logger or logging.getLogger(__name__)

    @property
    def relay_fee_lamports(self) -> int:
        return self._relay_fee_lamports

    def quote(self, token: "BridgeableToken | str", amount: AmountLike) -> Quote:
        deployment = resolve_token(self._profile, token)
        decimals = deployment.decimals
        requested_units = to_units(amount, decimals)
        fee_units = self._relay_fee_lamports
        fee_token = BridgeableToken.NATIVE

        if deployment.token is fee_token:
            # Same asset: the relay fee comes out of what arrives.
            require_above_relay_fee(deployment, requested_units, fee_units)
            receive_units = requested_units - fee_units
        else:
            receive_units = requested_units

        self._logger.debug(
            "Quoted %s %s: receive=%s fee=%s lamports",
            from_units(requested_units, decimals),
            deployment.token.symbol,
            receive_units,
            fee_units,
        )

        return Quote(
            token=deployment.token,
            requested_amount=from_units(requested_units, decimals),
            estimated_receive_amount=from_units(receive_units, decimals),
            relay_fee=from_units(fee_units, fee_token.decimals),
            destination_gas_fee=Decimal(DESTINATION_GAS_FEE),
            estimated_settlement_time=ESTIMATED_BRIDGE_TIME,
            estimated_settlement_seconds=ESTIMATED_BRIDGE_SECONDS,
            destination_token_address=deployment.destination_token or "",
            requested_units=requested_units,
            receive_units=receive_units,
            relay_fee_units=fee_units,
            relay_fee_token=fee_token,
        )

"""SOL and SPL balances for a Solana account, for quoting and pre-validation."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..solana import parse_public_key
from ...providers.solana_rpc import INVALID_PARAMS, SolanaRpcClient, SolanaRpcError
from .amounts import format_amount, from_units
from .constants import BridgeableToken
from .errors import InvalidAddressError
from .models import BalanceSnapshot, FundsCheck, Quote
from .network import NetworkProfile


class BalanceReader:
    def __init__(
        self,
        profile: NetworkProfile,
        rpc: SolanaRpcClient,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._profile = profile
        self._rpc = rpc
        self._logger = logger or logging.getLogger(__name__)

    async def balances(self, address: str, *, timeout_s: Optional[float] = None) -> BalanceSnapshot:
        """Native and token balances. Accounts that never held a token report zero."""

        try:
            owner = str(parse_public_key(address))
        except ValueError as exc:
            raise InvalidAddressError(f"Invalid {self._profile.source_chain} address: {address}") from exc

        native_units = await self._rpc.get_balance(owner, timeout_s=timeout_s)

        token_units: Dict[BridgeableToken, int] = {}
        for token, deployment in self._profile.tokens.items():
            if token.is_native:
                continue
            token_units[token] = await self._token_units(owner, deployment.source_mint, timeout_s=timeout_s)

        native = BridgeableToken.NATIVE
        return BalanceSnapshot(
            address=owner,
            native=from_units(native_units, native.decimals),
            tokens={token: from_units(units, token.decimals) for token, units in token_units.items()},
            native_units=native_units,
            token_units=token_units,
        )

    async def _token_units(self, owner: str, mint: str, *, timeout_s: Optional[float]) -> int:
        try:
            accounts = await self._rpc.get_token_accounts(owner, mint, timeout_s=timeout_s)
        except SolanaRpcError as exc:
            # Nodes answer "could not find mint" with invalid-params when the mint has no accounts.
            if exc.code == INVALID_PARAMS:
                self._logger.debug("No token accounts for %s (%s): %s", owner, mint, exc)
                return 0
            raise
        return sum(account["amount"] for account in accounts if account.get("mint") in (None, mint))


def check_funds(snapshot: BalanceSnapshot, quote: Quote) -> FundsCheck:
    """Does ``snapshot`` cover the principal plus the SOL relay fee described by ``quote``?"""

    native = BridgeableToken.NATIVE
    available_native = snapshot.native_units
    if quote.token.is_native:
        required_native = quote.requested_units + quote.relay_fee_units
        required_token = available_token = 0
    else:
        required_native = quote.relay_fee_units
        required_token = quote.requested_units
        available_token = snapshot.units_of(quote.token)

    shortfall = None
    if available_token < required_token:
        missing = from_units(required_token - available_token, quote.token.decimals)
        shortfall = f"Need {format_amount(missing)} more {quote.token.symbol}"
    elif available_native < required_native:
        missing = from_units(required_native - available_native, native.decimals)
        shortfall = f"Need {format_amount(missing)} more {native.symbol} for the transfer and relay fee"

    return FundsCheck(
        sufficient=shortfall is None,
        required_native_units=required_native,
        available_native_units=available_native,
        required_token_units=required_token,
        available_token_units=available_token,
        shortfall=shortfall,
    )

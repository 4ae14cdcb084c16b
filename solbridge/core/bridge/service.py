"""BridgeService wires quoting, building, tracking and balance reads for one network profile."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ...providers.base import DestinationStatusProvider
from ...providers.destination import IndexerDestinationStatusProvider, NullDestinationStatusProvider
from ...providers.solana_rpc import SolanaRpcClient
from .amounts import AmountLike
from .balances import BalanceReader, check_funds
from .builder import TransactionBuilder, make_transfer_request
from .constants import BridgeableToken
from .models import BalanceSnapshot, BuiltTransfer, FundsCheck, Quote, TransferRequest, TransferStatus
from .network import NetworkProfile, resolve
from .quote import QuoteEngine
from .status import StatusTracker


class BridgeService:
    """Library entry point for Solana -> Base bridging.

    Responsibilities:
    - Quote fee-adjusted receive amounts (no I/O)
    - Build unsigned Solana transactions for an external wallet to sign
    - Report transfer status from the source ledger and the relay indexer
    - Read SOL/USDC balances for pre-validation

    The service never signs, submits or custodies funds. Once a signed
    transaction lands on Solana it cannot be cancelled from here.

    Usage:
        service = BridgeService.from_settings()
        quote = service.quote("SOL", "1.5")
        built = await service.build(source, "0x...", "SOL", "1.5")
        status = await service.status(built.correlation_id, signature)
    """

    def __init__(
        self,
        profile: NetworkProfile,
        *,
        rpc: Optional[SolanaRpcClient] = None,
        destination: Optional[DestinationStatusProvider] = None,
        timeout_s: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self.profile = profile
        self.rpc = rpc or SolanaRpcClient(
            profile.rpc_url,
            commitment=profile.commitment,
            timeout_s=timeout_s,
        )
        self.destination = destination or NullDestinationStatusProvider()
        self.quotes = QuoteEngine(profile, logger=self._logger)
        self.builder = TransactionBuilder(profile, self.rpc, logger=self._logger)
        self.tracker = StatusTracker(profile, self.rpc, self.destination, logger=self._logger)
        self.reader = BalanceReader(profile, self.rpc, logger=self._logger)

        self._logger.info(
            "Bridge initialized: %s -> %s (%s), RPC %s",
            profile.source_chain,
            profile.destination_chain,
            profile.environment.value,
            profile.rpc_url,
        )

    @classmethod
    def from_settings(cls, settings: Any = None, **kwargs: Any) -> "BridgeService":
        if settings is None:
            from ...config import settings as default_settings

            settings = default_settings

        profile = resolve(settings.bridge_environment, settings)
        destination = kwargs.pop("destination", None)
        if destination is None and getattr(settings, "bridge_indexer_url", ""):
            destination = IndexerDestinationStatusProvider(settings.bridge_indexer_url)
        kwargs.setdefault("timeout_s", getattr(settings, "request_timeout_seconds", 30.0))
        return cls(profile, destination=destination, **kwargs)

    def quote(self, token: "BridgeableToken | str", amount: AmountLike) -> Quote:
        return self.quotes.quote(token, amount)

    def request(
        self,
        source_address: str,
        destination_address: str,
        token: "BridgeableToken | str",
        amount: AmountLike,
    ) -> TransferRequest:
        return make_transfer_request(
            self.profile,
            source_address=source_address,
            destination_address=destination_address,
            token=token,
            amount=amount,
            relay_fee_lamports=self.quotes.relay_fee_lamports,
        )

    async def build(
        self,
        source_address: str,
        destination_address: str,
        token: "BridgeableToken | str",
        amount: AmountLike,
        *,
        timeout_s: Optional[float] = None,
    ) -> BuiltTransfer:
        request = self.request(source_address, destination_address, token, amount)
        return await self.builder.build(request, timeout_s=timeout_s)

    async def status(
        self,
        correlation_id: str,
        source_signature: Optional[str] = None,
        *,
        previous: Optional[TransferStatus] = None,
        timeout_s: Optional[float] = None,
    ) -> TransferStatus:
        return await self.tracker.status(
            correlation_id,
            source_signature,
            previous=previous,
            timeout_s=timeout_s,
        )

    async def balances(self, address: str, *, timeout_s: Optional[float] = None) -> BalanceSnapshot:
        return await self.reader.balances(address, timeout_s=timeout_s)

    async def check_funds(
        self,
        source_address: str,
        token: "BridgeableToken | str",
        amount: AmountLike,
        *,
        timeout_s: Optional[float] = None,
    ) -> FundsCheck:
        quote = self.quote(token, amount)
        snapshot = await self.balances(source_address, timeout_s=timeout_s)
        return check_funds(snapshot, quote)

    async def close(self) -> None:
        await self.rpc.close()

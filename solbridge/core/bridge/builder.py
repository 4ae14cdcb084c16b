"""
Unsigned bridge transaction construction.

The builder validates the request, fetches one recent blockhash and returns a
base64 legacy transaction with empty signature slots. Instruction order is
fixed:

1. (SPL tokens only) idempotent creation of the vault's associated token account
2. principal transfer to the fee-receiver vault
3. relay fee in SOL to the fee receiver, always its own line item
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from solders.instruction import Instruction

from ..solana import (
    build_unsigned,
    create_associated_token_account_idempotent,
    encode_transaction,
    get_associated_token_address,
    parse_public_key,
    system_transfer,
    token_transfer,
)
from ...providers.solana_rpc import SolanaRpcClient
from .amounts import AmountLike, format_amount, from_units, to_units
from .constants import (
    AUTO_RELAY_FEE_LAMPORTS,
    BridgeableToken,
    CORRELATION_ID_PREFIX,
    CORRELATION_SUFFIX_LENGTH,
    ESTIMATED_BRIDGE_SECONDS,
)
from .errors import InvalidAddressError
from .models import BuiltTransfer, TransferRequest
from .network import NetworkProfile, TokenDeployment
from .quote import require_above_relay_fee, resolve_token


_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def new_correlation_id(now_ms: Optional[int] = None) -> str:
    """``bridge_<epoch-ms>_<random [a-z0-9]>``; a local tracking handle, not a ledger id."""

    millis = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(CORRELATION_SUFFIX_LENGTH))
    return f"{CORRELATION_ID_PREFIX}_{millis}_{suffix}"


def make_transfer_request(
    profile: NetworkProfile,
    *,
    source_address: str,
    destination_address: str,
    token: "BridgeableToken | str",
    amount: AmountLike,
    relay_fee_lamports: int = AUTO_RELAY_FEE_LAMPORTS,
) -> TransferRequest:
    """Validate raw caller input into a TransferRequest. Never touches the network."""

    if not source_address or not destination_address:
        raise InvalidAddressError("Both source and destination addresses are required")
    try:
        parse_public_key(source_address)
    except ValueError as exc:
        raise InvalidAddressError(f"Invalid {profile.source_chain} address: {source_address}") from exc
    if not profile.is_valid_destination(destination_address):
        raise InvalidAddressError(f"Invalid {profile.destination_chain} address format: {destination_address}")

    deployment = resolve_token(profile, token)
    units = to_units(amount, deployment.decimals)
    require_above_relay_fee(deployment, units, relay_fee_lamports)
    return TransferRequest(
        source_address=source_address.strip(),
        destination_address=destination_address,
        token=deployment.token,
        amount=from_units(units, deployment.decimals),
    )


class TransactionBuilder:
    """Builds the unsigned Solana side of a bridge transfer. Never holds keys, never signs."""

    def __init__(
        self,
        profile: NetworkProfile,
        rpc: SolanaRpcClient,
        *,
        relay_fee_lamports: int = AUTO_RELAY_FEE_LAMPORTS,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._profile = profile
        self._rpc = rpc
        self._relay_fee_lamports = relay_fee_lamports
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    def instructions_for(
        self,
        request: TransferRequest,
        deployment: TokenDeployment,
    ) -> List[Instruction]:
        source = parse_public_key(request.source_address)
        vault = self._profile.fee_receiver_key
        units = to_units(request.amount, deployment.decimals)

        instructions: List[Instruction] = []
        if deployment.token.is_native:
            instructions.append(system_transfer(source, vault, units))
        else:
            mint = deployment.mint_key
            source_ata = get_associated_token_address(source, mint)
            vault_ata = get_associated_token_address(vault, mint)
            self._logger.debug("%s transfer %s -> %s", deployment.token.symbol, source_ata, vault_ata)
            instructions.append(create_associated_token_account_idempotent(source, vault_ata, vault, mint))
            instructions.append(token_transfer(source_ata, vault_ata, source, units))

        instructions.append(system_transfer(source, vault, self._relay_fee_lamports))
        return instructions

    async def build(
        self,
        request: TransferRequest,
        *,
        timeout_s: Optional[float] = None,
    ) -> BuiltTransfer:
        # Re-validate so hand-made requests get the same guarantees as parsed ones.
        request = make_transfer_request(
            self._profile,
            source_address=request.source_address,
            destination_address=request.destination_address,
            token=request.token,
            amount=request.amount,
            relay_fee_lamports=self._relay_fee_lamports,
        )
        deployment = resolve_token(self._profile, request.token)
        instructions = self.instructions_for(request, deployment)

        latest = await self._rpc.get_latest_blockhash(timeout_s=timeout_s)
        transaction = build_unsigned(request.source_address, instructions, latest.blockhash)
        serialized = encode_transaction(transaction, require_all_signatures=False)

        now = self._clock()
        correlation_id = new_correlation_id(int(now * 1000))
        arrival = datetime.fromtimestamp(now, tz=timezone.utc) + timedelta(seconds=ESTIMATED_BRIDGE_SECONDS)

        self._logger.info(
            "Built bridge transaction %s: %s %s -> %s (%d instructions)",
            correlation_id,
            request.amount,
            request.token.symbol,
            request.destination_address,
            len(instructions),
        )

        return BuiltTransfer(
            serialized_transaction=serialized,
            correlation_id=correlation_id,
            estimated_arrival=arrival.isoformat().replace("+00:00", "Z"),
            instructions=(
                f"Sign this transaction to bridge {format_amount(request.amount)} {request.token.symbol} "
                f"from {self._profile.source_chain} to {self._profile.destination_chain}. "
                f"Your tokens will arrive at {request.destination_address} "
                f"in approximately {ESTIMATED_BRIDGE_SECONDS} seconds."
            ),
            recent_blockhash=latest.blockhash,
            last_valid_block_height=latest.last_valid_block_height,
        )

"""
Bridge transfer status tracking.

State machine::

    pending -> validating -> executing -> completed
                   |             |
                   +--> failed <-+

The tracker holds no state between polls. Everything is re-derived from the
Solana signature status and, once the source side is finalized, from the
destination status provider. Callers that want a strictly monotonic view
pass the last status they saw as ``previous``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from solders.pubkey import Pubkey

from ..solana import (
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    b58decode,
    decode_system_transfer,
    decode_token_transfer,
    decode_transaction,
    get_associated_token_address,
    instruction_accounts,
    program_id_of,
)
from ...providers.base import DestinationStatusProvider
from ...providers.destination import NullDestinationStatusProvider
from ...providers.solana_rpc import SolanaRpcClient
from .amounts import from_units
from .constants import BridgeableToken
from .errors import InvalidSignatureError, NetworkUnavailableError
from .models import TransferState, TransferStatus
from .network import NetworkProfile


logger = logging.getLogger(__name__)

SIGNATURE_BYTES = 64
FINALIZED = "finalized"


def validate_signature(signature: str) -> str:
    candidate = (signature or "").strip()
    try:
        raw = b58decode(candidate)
    except ValueError as exc:
        raise InvalidSignatureError("Transaction signature is not base58") from exc
    if len(raw) != SIGNATURE_BYTES:
        raise InvalidSignatureError("Transaction signature must decode to 64 bytes")
    return candidate


def describe_error(err: Any) -> str:
    try:
        detail = json.dumps(err, sort_keys=True)
    except (TypeError, ValueError):
        detail = str(err)
    return f"Solana transaction failed: {detail}"


def advance(previous: Optional[TransferStatus], observed: TransferStatus) -> TransferStatus:
    """Merge a fresh observation into the last known status without moving backwards."""

    if previous is None:
        return observed
    if previous.state.is_terminal or observed.state.rank < previous.state.rank:
        return replace(
            previous,
            amount=previous.amount if previous.amount is not None else observed.amount,
            token=previous.token if previous.token is not None else observed.token,
        )
    return replace(
        observed,
        amount=observed.amount if observed.amount is not None else previous.amount,
        token=observed.token if observed.token is not None else previous.token,
        destination_transaction_hash=(
            observed.destination_transaction_hash or previous.destination_transaction_hash
        ),
    )


class StatusTracker:
    """Reports where a bridge transfer is in its lifecycle."""

    def __init__(
        self,
        profile: NetworkProfile,
        rpc: SolanaRpcClient,
        destination: Optional[DestinationStatusProvider] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._profile = profile
        self._rpc = rpc
        self._destination = destination or NullDestinationStatusProvider()
        self._logger = logger or logging.getLogger(__name__)
        self._vault_accounts: Optional[Dict[Pubkey, BridgeableToken]] = None

    def _vault_token_accounts(self) -> Dict[Pubkey, BridgeableToken]:
        if self._vault_accounts is None:
            vault = self._profile.fee_receiver_key
            self._vault_accounts = {
                get_associated_token_address(vault, deployment.mint_key): token
                for token, deployment in self._profile.tokens.items()
                if not token.is_native
            }
        return self._vault_accounts

    async def status(
        self,
        correlation_id: str,
        source_signature: Optional[str] = None,
        *,
        previous: Optional[TransferStatus] = None,
        timeout_s: Optional[float] = None,
    ) -> TransferStatus:
        """Poll once.

        Without a signature the transfer cannot be located and stays ``pending``;
        that is an expected answer, not an error. Transient RPC failures raise
        NetworkUnavailableError and leave the caller's last known state untouched.
        """

        if previous is not None and previous.state.is_terminal:
            return previous

        signature = source_signature or (previous.source_signature if previous else None)
        if not signature:
            return advance(previous, TransferStatus(correlation_id=correlation_id, state=TransferState.PENDING))

        signature = validate_signature(signature)
        observed = await self._observe(correlation_id, signature, timeout_s=timeout_s)
        result = advance(previous, observed)
        self._logger.debug("Bridge %s status %s", correlation_id, result.state.value)
        return result

    async def _observe(
        self,
        correlation_id: str,
        signature: str,
        *,
        timeout_s: Optional[float],
    ) -> TransferStatus:
        source = await self._rpc.get_signature_status(signature, timeout_s=timeout_s)
        if source is None:
            return TransferStatus(
                correlation_id=correlation_id,
                state=TransferState.PENDING,
                source_signature=signature,
            )

        amount, token = await self._principal(signature, timeout_s=timeout_s)
        base = TransferStatus(
            correlation_id=correlation_id,
            state=TransferState.VALIDATING,
            source_signature=signature,
            amount=amount,
            token=token,
        )

        if source.err is not None:
            self._logger.info("Bridge %s source transaction failed: %s", correlation_id, source.err)
            return replace(base, state=TransferState.FAILED, error=describe_error(source.err))

        if source.confirmation_status != FINALIZED:
            return base

        observation = await self._destination.lookup(signature, timeout_s=timeout_s)
        if observation is None or observation.state == TransferState.EXECUTING.value:
            return replace(
                base,
                state=TransferState.EXECUTING,
                destination_transaction_hash=observation.transaction_hash if observation else None,
            )
        if observation.state == TransferState.COMPLETED.value:
            return replace(
                base,
                state=TransferState.COMPLETED,
                destination_transaction_hash=observation.transaction_hash,
            )
        return replace(
            base,
            state=TransferState.FAILED,
            destination_transaction_hash=observation.transaction_hash,
            error=observation.error or f"{self._profile.destination_chain} relay execution failed",
        )

    async def _principal(
        self,
        signature: str,
        *,
        timeout_s: Optional[float],
    ) -> Tuple[Optional[Decimal], Optional[BridgeableToken]]:
        """Principal amount and token moved to the vault, decoded from the source transaction."""

        record = await self._rpc.get_transaction(signature, timeout_s=timeout_s)
        if not record:
            return None, None
        encoded = record.get("transaction")
        if isinstance(encoded, list):
            encoded = encoded[0] if encoded else None
        if not isinstance(encoded, str):
            return None, None

        try:
            transaction = decode_transaction(encoded)
        except ValueError as exc:
            self._logger.debug("Could not decode transaction %s: %s", signature, exc)
            return None, None

        message = transaction.message
        vault = self._profile.fee_receiver_key
        vault_accounts = self._vault_token_accounts()
        native_transfers = []

        for instruction in message.instructions:
            program = program_id_of(message, instruction)
            accounts = instruction_accounts(message, instruction)
            recipient = accounts[1] if len(accounts) >= 2 else None
            if recipient is None:
                continue
            if program == TOKEN_PROGRAM_ID:
                units = decode_token_transfer(instruction.data)
                token = vault_accounts.get(recipient)
                if units is not None and token is not None:
                    return from_units(units, token.decimals), token
            elif program == SYSTEM_PROGRAM_ID and recipient == vault:
                lamports = decode_system_transfer(instruction.data)
                if lamports is not None:
                    native_transfers.append(lamports)

        # Native bridges carry two vault transfers: principal first, then the relay fee.
        if len(native_transfers) >= 2:
            native = BridgeableToken.NATIVE
            return from_units(native_transfers[0], native.decimals), native
        return None, None


async def wait_for_transfer(
    tracker: StatusTracker,
    correlation_id: str,
    source_signature: Optional[str],
    *,
    timeout_s: float = 120.0,
    poll_interval_s: float = 1.0,
    max_interval_s: float = 5.0,
    request_timeout_s: Optional[float] = None,
) -> TransferStatus:
    """Poll with exponential backoff until a terminal state or ``timeout_s`` elapses.

    Transient network failures are retried. Returns the last known status,
    which is non-terminal when the deadline is reached.
    """

    start_time = time.monotonic()
    interval = poll_interval_s
    last = TransferStatus(
        correlation_id=correlation_id,
        state=TransferState.PENDING,
        source_signature=source_signature,
    )

    while True:
        try:
            last = await tracker.status(
                correlation_id,
                source_signature,
                previous=last,
                timeout_s=request_timeout_s,
            )
        except NetworkUnavailableError as exc:
            logger.warning("Status poll for %s failed, retrying: %s", correlation_id, exc)

        if last.state.is_terminal:
            return last
        if (time.monotonic() - start_time) + interval > timeout_s:
            return last

        await asyncio.sleep(interval)
        # Exponential backoff, capped at the steady interval
        interval = min(interval * 1.5, max_interval_s)

"""
Read-only Solana JSON-RPC client.

Every call is a single round trip with a caller-supplied (or default)
timeout. Retries and backoff are left to the orchestration layer; transport
failures surface as NetworkUnavailableError.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..core.bridge.errors import NetworkUnavailableError
from .base import Provider


logger = logging.getLogger(__name__)

TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

# JSON-RPC codes caused by the request itself rather than node health.
INVALID_PARAMS = -32602


class SolanaRpcError(NetworkUnavailableError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, message: str, *, method: Optional[str] = None, code: Optional[int] = None):
        super().__init__(message, method=method)
        self.code = code


@dataclass
class LatestBlockhash:
    blockhash: str
    last_valid_block_height: Optional[int]


@dataclass
class SignatureStatus:
    slot: Optional[int]
    confirmations: Optional[int]
    confirmation_status: Optional[str]
    err: Any


class SolanaRpcClient(Provider):
    """Thin async wrapper around the Solana JSON-RPC endpoints the bridge needs."""

    name = "solana-rpc"

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.timeout_s = timeout_s
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "RPC URL not configured"}
        try:
            await self.call("getHealth", [], timeout_s=5.0)
        except NetworkUnavailableError as exc:
            return {"status": "degraded", "reason": str(exc)}
        return {"status": "healthy"}

    async def call(
        self,
        method: str,
        params: List[Any],
        *,
        timeout_s: Optional[float] = None,
    ) -> Any:
        """Issue one JSON-RPC request and return its ``result`` member."""

        client = await self._get_client()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        timeout = timeout_s if timeout_s is not None else self.timeout_s

        try:
            response = await client.post(
                self.rpc_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Solana RPC %s returned HTTP %s", method, exc.response.status_code)
            raise NetworkUnavailableError(
                f"Solana RPC HTTP error {exc.response.status_code}", method=method
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Solana RPC %s unreachable: %s", method, exc)
            raise NetworkUnavailableError(f"Solana RPC unreachable: {exc}", method=method) from exc
        except ValueError as exc:
            raise NetworkUnavailableError("Solana RPC returned a non-JSON body", method=method) from exc

        if not isinstance(data, dict):
            raise NetworkUnavailableError("Unexpected response from Solana RPC", method=method)
        if data.get("error"):
            error = data["error"] if isinstance(data["error"], dict) else {"message": str(data["error"])}
            raise SolanaRpcError(
                f"RPC error: {error.get('message', error)}",
                method=method,
                code=error.get("code"),
            )
        return data.get("result")

    async def get_latest_blockhash(self, *, timeout_s: Optional[float] = None) -> LatestBlockhash:
        result = await self.call(
            "getLatestBlockhash",
            [{"commitment": self.commitment}],
            timeout_s=timeout_s,
        )
        value = (result or {}).get("value") or {}
        blockhash = value.get("blockhash")
        if not blockhash:
            raise NetworkUnavailableError("getLatestBlockhash returned no blockhash", method="getLatestBlockhash")
        return LatestBlockhash(
            blockhash=blockhash,
            last_valid_block_height=value.get("lastValidBlockHeight"),
        )

    async def get_signature_status(
        self,
        signature: str,
        *,
        timeout_s: Optional[float] = None,
    ) -> Optional[SignatureStatus]:
        """Status of one signature, searching history so old transfers stay visible."""

        result = await self.call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": True}],
            timeout_s=timeout_s,
        )
        values = (result or {}).get("value") or []
        entry = values[0] if values else None
        if not entry:
            return None
        return SignatureStatus(
            slot=entry.get("slot"),
            confirmations=entry.get("confirmations"),
            confirmation_status=entry.get("confirmationStatus"),
            err=entry.get("err"),
        )

    async def get_transaction(
        self,
        signature: str,
        *,
        commitment: str = "confirmed",
        timeout_s: Optional[float] = None,
    ) -> Optional[Dict[str, Any]]:
        """Raw transaction (base64) plus meta, or None when the node has no record yet."""

        result = await self.call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "base64",
                    "commitment": commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
            timeout_s=timeout_s,
        )
        return result or None

    async def get_balance(self, address: str, *, timeout_s: Optional[float] = None) -> int:
        """SOL balance in lamports."""

        result = await self.call(
            "getBalance",
            [address, {"commitment": self.commitment}],
            timeout_s=timeout_s,
        )
        return int((result or {}).get("value", 0) or 0)

    async def get_token_accounts(
        self,
        owner: str,
        mint: Optional[str] = None,
        *,
        timeout_s: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        filter_option = {"mint": mint} if mint else {"programId": TOKEN_PROGRAM}

        result = await self.call(
            "getTokenAccountsByOwner",
            [
                owner,
                filter_option,
                {"encoding": "jsonParsed", "commitment": self.commitment},
            ],
            timeout_s=timeout_s,
        )

        accounts = []
        for item in (result or {}).get("value", []):
            parsed = item.get("account", {}).get("data", {}).get("parsed", {})
            info = parsed.get("info", {})
            accounts.append({
                "address": item.get("pubkey"),
                "mint": info.get("mint"),
                "owner": info.get("owner"),
                "amount": int(info.get("tokenAmount", {}).get("amount", 0)),
                "decimals": info.get("tokenAmount", {}).get("decimals", 0),
            })

        return accounts

"""Destination-side (Base) relay status providers."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..core.bridge.errors import NetworkUnavailableError
from .base import DestinationObservation, DestinationStatusProvider


logger = logging.getLogger(__name__)

_COMPLETED = {"completed", "complete", "executed", "success", "succeeded", "relayed"}
_FAILED = {"failed", "failure", "reverted", "error", "expired", "timeout"}


class NullDestinationStatusProvider(DestinationStatusProvider):
    """Used when no indexer is configured: finalized transfers stay ``executing``."""

    name = "none"

    async def ready(self) -> bool:
        return False

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "unavailable", "reason": "No destination indexer configured"}

    async def lookup(
        self,
        source_signature: str,
        *,
        timeout_s: Optional[float] = None,
    ) -> Optional[DestinationObservation]:
        return None


class IndexerDestinationStatusProvider(DestinationStatusProvider):
    """Queries a relay indexer at ``GET {base_url}/messages/{source_signature}``.

    The indexer is expected to answer with ``{"status": ..., "transactionHash": ..., "error": ...}``
    and 404 while it has not seen the message.
    """

    name = "relay-indexer"

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "user-agent": "SolbridgeStatusClient/1.0",
        }

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Indexer URL not configured"}
        return {"status": "configured"}

    async def lookup(
        self,
        source_signature: str,
        *,
        timeout_s: Optional[float] = None,
    ) -> Optional[DestinationObservation]:
        timeout = timeout_s if timeout_s is not None else self.timeout_s
        path = f"/messages/{source_signature}"

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=timeout, transport=self._transport
            ) as client:
                response = await client.get(path, headers=self._headers())
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise NetworkUnavailableError(
                f"Relay indexer HTTP error {exc.response.status_code}", method="lookup"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkUnavailableError(f"Relay indexer unreachable: {exc}", method="lookup") from exc
        except ValueError as exc:
            raise NetworkUnavailableError("Relay indexer returned a non-JSON body", method="lookup") from exc

        if not isinstance(payload, dict):
            raise NetworkUnavailableError("Unexpected response from relay indexer", method="lookup")

        raw_status = str(payload.get("status") or "").strip().lower()
        tx_hash = payload.get("transactionHash") or payload.get("txHash")
        if raw_status in _COMPLETED:
            return DestinationObservation(state="completed", transaction_hash=tx_hash)
        if raw_status in _FAILED:
            error = payload.get("error") or f"Relay reported {raw_status}"
            return DestinationObservation(state="failed", transaction_hash=tx_hash, error=str(error))
        if raw_status:
            logger.debug("Relay indexer status %s for %s treated as executing", raw_status, source_signature)
        return DestinationObservation(state="executing", transaction_hash=tx_hash)

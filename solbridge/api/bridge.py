"""
Solana -> Base bridge routes.

Routes:
GET  /bridge/quote            - fee-adjusted quote
POST /bridge/build            - unsigned transaction for the wallet to sign
GET  /bridge/status/{id}      - transfer lifecycle state
GET  /bridge/balances         - SOL / USDC balances of a Solana wallet
"""

from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from ..core.bridge import (
    BridgeError,
    BridgeInputError,
    ConfigurationError,
    NetworkUnavailableError,
)
from ..core.bridge.service import BridgeService

router = APIRouter(prefix="/bridge")


@lru_cache(maxsize=1)
def get_bridge_service() -> BridgeService:
    """Process-wide service; the network profile is fixed at first use."""

    return BridgeService.from_settings()


async def close_bridge_service() -> None:
    """Release the process-wide service, if one was created."""

    if get_bridge_service.cache_info().currsize:
        await get_bridge_service().close()
        get_bridge_service.cache_clear()


class BuildRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(..., alias="fromAddress", description="Solana wallet address (fee payer)")
    to_address: str = Field(..., alias="toAddress", description="Base wallet address (0x...)")
    token: str = Field(..., description="SOL or USDC")
    amount: Decimal = Field(..., description="Amount in token units, e.g. 1.5")


def _raise_http(exc: BridgeError) -> NoReturn:
    if isinstance(exc, BridgeInputError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, NetworkUnavailableError):
        raise HTTPException(
            status_code=503,
            detail=f"{exc} (retry shortly)",
            headers={"Retry-After": "2"},
        ) from exc
    if isinstance(exc, ConfigurationError):
        raise HTTPException(status_code=500, detail=f"Bridge misconfigured: {exc}") from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/quote")
async def bridge_quote(
    token: str = Query("SOL", description="SOL or USDC"),
    amount: str = Query("1", description="Amount in token units"),
    service: BridgeService = Depends(get_bridge_service),
) -> Dict[str, Any]:
    try:
        quote = service.quote(token, amount)
    except BridgeError as exc:
        _raise_http(exc)
    return {"success": True, "data": quote.to_dict()}


@router.post("/build")
async def bridge_build(
    request: BuildRequest,
    service: BridgeService = Depends(get_bridge_service),
) -> Dict[str, Any]:
    try:
        built = await service.build(
            request.from_address,
            request.to_address,
            request.token,
            request.amount,
        )
    except BridgeError as exc:
        _raise_http(exc)
    return {"success": True, "data": built.to_dict()}


@router.get("/status/{correlation_id}")
async def bridge_status(
    correlation_id: str,
    signature: Optional[str] = Query(None, description="Solana transaction signature, once submitted"),
    service: BridgeService = Depends(get_bridge_service),
) -> Dict[str, Any]:
    try:
        status = await service.status(correlation_id, signature)
    except BridgeError as exc:
        _raise_http(exc)
    return {"success": True, "data": status.to_dict()}


@router.get("/balances")
async def bridge_balances(
    address: str = Query(..., description="Solana wallet address"),
    service: BridgeService = Depends(get_bridge_service),
) -> Dict[str, Any]:
    try:
        snapshot = await service.balances(address)
    except BridgeError as exc:
        _raise_http(exc)
    return {"success": True, "data": snapshot.to_dict()}

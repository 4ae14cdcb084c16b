from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..core.bridge.service import BridgeService
from .bridge import get_bridge_service

router = APIRouter()


@router.get("/healthz")
async def health_check(service: BridgeService = Depends(get_bridge_service)) -> Dict[str, Any]:
    """Report the active network profile and whether its providers answer"""

    provider_status = {
        "solana_rpc": await service.rpc.health_check(),
        "destination_indexer": await service.destination.health_check(),
    }

    return {
        "status": "healthy" if provider_status["solana_rpc"]["status"] == "healthy" else "degraded",
        "environment": service.profile.environment.value,
        "route": f"{service.profile.source_chain} -> {service.profile.destination_chain}",
        "providers": provider_status,
    }

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..config import settings
from ..providers.base import Provider
from ..services.engine import NLTEService, get_nlte_service

router = APIRouter()


@router.get("/healthz")
async def health_check(service: NLTEService = Depends(get_nlte_service)) -> Dict[str, Any]:
    """Health check endpoint that verifies the Celo RPC and feature availability"""

    oracle = service.validator.balance_oracle
    if isinstance(oracle, Provider):
        rpc_status = await oracle.health_check()
    else:
        rpc_status = {"status": "unavailable", "reason": "No RPC provider configured"}

    return {
        "status": "healthy" if rpc_status["status"] == "healthy" else "degraded",
        "network": settings.network_slug,
        "chainId": settings.chain_id,
        "providers": {"celo_rpc": rpc_status},
        "features": {
            "staking": service.validator.features.is_staking_supported(),
        },
    }

"""
Adapter status route

GET /adapters/status: live probe of every carrier. 200 while at least one
answers (ONLINE or DEGRADED), 503 when all are down.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shipquote.api.deps import get_health_service
from shipquote.schemas.quote import SystemStatusOut
from shipquote.services.provider_health import ProviderHealthService, SystemState

router = APIRouter(tags=["Health"])


@router.get("/adapters/status", response_model=SystemStatusOut, responses={503: {"model": SystemStatusOut}})
async def get_adapters_status(health_service: ProviderHealthService = Depends(get_health_service)):
    system_status = await health_service.get_system_status()
    body = SystemStatusOut.from_status(system_status)

    if system_status.status == SystemState.OFFLINE:
        return JSONResponse(status_code=503, content=body.model_dump(mode="json", by_alias=True))

    return body

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST

from api.dependencies import RegistryDep
from api.models.sessions import HealthResponse
from metrics import generate_metrics

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(registry: RegistryDep) -> HealthResponse:
    """Liveness check; the engine has no backing stores to probe."""
    return HealthResponse(
        status="healthy",
        active_sessions=len(registry),
        drivers_loaded=registry.driver_count,
    )


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(content=generate_metrics(), media_type=CONTENT_TYPE_LATEST)

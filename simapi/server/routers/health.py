"""
Health check and diagnostic endpoints.

/health is the liveness probe for load balancers; it never stresses the
process and is skipped by the audit log. /info returns the diagnostic
payload alone.
"""
from fastapi import APIRouter, Request

from simapi import __version__
from simapi.server.schemas import HealthResponse, SimulationResponse
from simapi.server.services.system_info import get_system_info


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report that the process is up."""
    return HealthResponse(
        status="healthy",
        version=__version__,
    )


@router.get("/info", response_model=SimulationResponse)
async def system_info(request: Request) -> SimulationResponse:
    """Diagnostic payload without running any generator."""
    return SimulationResponse(system=get_system_info(request))

"""
Simulation endpoints: stress generators and fault injection.

GET /delay/{ms}                     - Sleep for ms milliseconds
GET /delay/{ms_min}/{ms_max}        - Sleep for a random time in [ms_min, ms_max)
GET /cpu/{seconds}/{percentage}     - Load every core at ~percentage
GET /memory/{seconds}/{size_in_m}   - Hold size_in_m MiB
GET /disk/{seconds}/{size_in_m}     - Keep a size_in_m MiB scratch file
GET /exception[/{probability}]      - Fail with a 500
GET /crash[/{probability}]          - Abort the process
GET /exit                           - Exit the process with status 0
GET /{status_code}                  - Respond with that status code

Each stress route also exists without parameters, using the defaults.
Path parameters use the int convertor, so only digits match.
"""
from typing import Optional

from fastapi import APIRouter, Request, Response
from starlette.concurrency import run_in_threadpool

from simapi.server.exceptions import ValidationError
from simapi.server.middleware import get_request_id
from simapi.server.schemas import SimulationResponse, StressResultInfo
from simapi.server.services import simulation_service
from simapi.server.services.system_info import get_system_info
from simapi.stress.result import StressResult


router = APIRouter(tags=["simulation"])

DEFAULT_DELAY_MS = 3000
DEFAULT_DELAY_MIN_MS = 1000
DEFAULT_DELAY_MAX_MS = 5000
DEFAULT_SECONDS = 10
DEFAULT_PERCENTAGE = 100
DEFAULT_SIZE_MB = 1024


async def _respond(request: Request, result: Optional[StressResult] = None) -> SimulationResponse:
    system = await run_in_threadpool(get_system_info, request)
    return SimulationResponse(
        result=StressResultInfo(**result.to_dict()) if result is not None else None,
        system=system,
    )


# =============================================================================
# Latency
# =============================================================================


@router.get("/delay", response_model=SimulationResponse)
@router.get("/delay/{ms:int}", response_model=SimulationResponse)
async def delay(request: Request, ms: int = DEFAULT_DELAY_MS) -> SimulationResponse:
    result = await simulation_service.delay(ms)
    return await _respond(request, result)


@router.get("/delay/{ms_min:int}/{ms_max:int}", response_model=SimulationResponse)
async def delay_range(
    request: Request,
    ms_min: int = DEFAULT_DELAY_MIN_MS,
    ms_max: int = DEFAULT_DELAY_MAX_MS,
) -> SimulationResponse:
    """Sleep for a random time; ms_max <= ms_min sleeps exactly ms_min."""
    result = await simulation_service.delay_range(ms_min, ms_max)
    return await _respond(request, result)


# =============================================================================
# Resource stress
# =============================================================================


@router.get("/cpu", response_model=SimulationResponse)
@router.get("/cpu/{seconds:int}/{percentage:int}", response_model=SimulationResponse)
async def cpu(
    request: Request,
    seconds: int = DEFAULT_SECONDS,
    percentage: int = DEFAULT_PERCENTAGE,
) -> SimulationResponse:
    result = await simulation_service.burn_cpu(seconds, percentage)
    return await _respond(request, result)


@router.get("/memory", response_model=SimulationResponse)
@router.get("/memory/{seconds:int}/{size_in_m:int}", response_model=SimulationResponse)
async def memory(
    request: Request,
    seconds: int = DEFAULT_SECONDS,
    size_in_m: int = DEFAULT_SIZE_MB,
) -> SimulationResponse:
    result = await simulation_service.hold_memory(seconds, size_in_m)
    return await _respond(request, result)


@router.get("/disk", response_model=SimulationResponse)
@router.get("/disk/{seconds:int}/{size_in_m:int}", response_model=SimulationResponse)
async def disk(
    request: Request,
    seconds: int = DEFAULT_SECONDS,
    size_in_m: int = DEFAULT_SIZE_MB,
) -> SimulationResponse:
    result = await simulation_service.write_and_hold(seconds, size_in_m)
    return await _respond(request, result)


# =============================================================================
# Fault injection
# =============================================================================


@router.get("/exception", response_model=SimulationResponse)
@router.get("/exception/{probability:int}", response_model=SimulationResponse)
async def exception(request: Request, probability: int = 100) -> SimulationResponse:
    """500 with code injected_failure when the gate fires, 200 otherwise."""
    simulation_service.raise_exception(probability)
    return await _respond(request)


@router.get("/crash", response_model=SimulationResponse)
@router.get("/crash/{probability:int}", response_model=SimulationResponse)
async def crash(request: Request, probability: int = 100) -> SimulationResponse:
    """Abort the process when the gate fires; the client sees a dropped connection."""
    simulation_service.crash(probability)
    return await _respond(request)


@router.get("/exit")
async def exit_process() -> None:
    """Exit the process with status 0; no response is sent."""
    simulation_service.exit_process()


@router.get("/{status_code:int}")
async def return_status_code(status_code: int) -> Response:
    if not 200 <= status_code <= 599:
        raise ValidationError(
            f"status_code must be in [200, 599], got {status_code}",
            request_id=get_request_id(),
        )
    return Response(status_code=status_code)

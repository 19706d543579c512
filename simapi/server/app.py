"""
FastAPI application factory.

Usage:
    from simapi.server.app import create_app

    app = create_app()

Or run directly:
    uvicorn simapi.server:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from simapi import __version__, telemetry
from simapi.audit import get_audit_logger
from simapi.exceptions import SimapiError
from simapi.server.config import get_settings
from simapi.server.exceptions import APIError
from simapi.server.middleware import RequestTrackingMiddleware, setup_audit_logging
from simapi.server.schemas import ErrorResponse, ErrorDetail
from simapi.server.routers import health, simulation
from simapi.server.services import simulation_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    setup_audit_logging()
    simulation_service.start()

    yield

    # Shutdown: in-flight holds release their memory and scratch files
    simulation_service.shutdown()
    get_audit_logger().flush()


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    request_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    request_id = request_id or getattr(request.state, "request_id", None) or "unknown"
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=code,
                message=message,
                request_id=request_id,
                details=details,
            )
        ).model_dump(exclude_none=True),
        headers={"X-Request-ID": request_id},
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    # Settings loaded for validation; app configuration is static.
    get_settings()

    app = FastAPI(
        title="Simulation API",
        description="Controlled resource stress and fault injection over HTTP",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestTrackingMiddleware)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Handle custom API errors."""
        return _error_response(
            request, exc.status_code, exc.code, exc.message, request_id=exc.request_id
        )

    @app.exception_handler(SimapiError)
    async def engine_error_handler(request: Request, exc: SimapiError) -> JSONResponse:
        """Engine errors that escaped the service layer."""
        logger.warning("Unhandled engine error: %s", exc.message)
        return _error_response(request, 500, exc.code, exc.message, details=exc.details)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.exception("Unhandled error")
        return _error_response(request, 500, "internal_error", "An internal error occurred")

    app.include_router(health.router)
    app.include_router(simulation.router)

    telemetry.instrument_app(app)

    return app


# Default app instance for uvicorn
app = create_app()

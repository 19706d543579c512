"""
Request tracking middleware.

Provides:
- Request ID generation and propagation
- Audit logging integration
- Request timing
"""

from __future__ import annotations

import time
import uuid
from contextvars import ContextVar
from typing import Awaitable, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from simapi.audit import configure_audit_logger, get_audit_logger
from simapi.server.config import get_settings


request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_var.get()


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req-{uuid.uuid4().hex[:16]}"


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request tracking and audit logging.

    Extracts the request ID from headers, generates one if missing,
    and records the request lifecycle in the audit log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID")
        if not request_id:
            request_id = generate_request_id()

        request_id_token = request_id_var.set(request_id)
        request.state.request_id = request_id

        audit = get_audit_logger()
        tracked = not request.url.path.startswith("/health")

        if tracked:
            audit.log_request_submitted(request_id=request_id, path=request.url.path)

        start_time = time.time()

        try:
            response = await call_next(request)

            execution_time_ms = (time.time() - start_time) * 1000

            if tracked:
                if response.status_code < 400:
                    audit.log_request_completed(
                        request_id=request_id,
                        execution_time_ms=execution_time_ms,
                        status_code=response.status_code,
                    )
                else:
                    audit.log_request_failed(
                        request_id=request_id,
                        error_category=f"http_{response.status_code}",
                        execution_time_ms=execution_time_ms,
                        status_code=response.status_code,
                    )

            response.headers["X-Request-ID"] = request_id

            return response

        except Exception as e:
            execution_time_ms = (time.time() - start_time) * 1000
            audit.log_request_failed(
                request_id=request_id,
                error_category=type(e).__name__,
                execution_time_ms=execution_time_ms,
            )
            raise

        finally:
            request_id_var.reset(request_id_token)


def setup_audit_logging() -> None:
    """
    Configure audit logging based on settings.

    Call this at app startup.
    """
    settings = get_settings()
    configure_audit_logger(
        output_path=settings.audit_log_path,
        include_timestamps=True,
        enabled=settings.audit_enabled,
    )

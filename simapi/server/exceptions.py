"""
HTTP exception types for the API server.
"""

from typing import Optional


class APIError(Exception):
    """Base exception for API errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, request_id: Optional[str] = None) -> None:
        self.message = message
        self.request_id = request_id
        super().__init__(message)


class ValidationError(APIError):
    """Request parameters are out of range or exceed a guard rail."""

    status_code = 400
    code = "validation_error"


class InjectedFailureError(APIError):
    """The fault injector fired its recoverable failure."""

    status_code = 500
    code = "injected_failure"


class ResourceExhaustedError(APIError):
    """Memory or disk ran out while a generator was running."""

    status_code = 507
    code = "resource_exhausted"

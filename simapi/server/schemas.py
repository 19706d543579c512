"""
Pydantic models for API request/response schemas.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


# =============================================================================
# Diagnostic Payload Schemas
# =============================================================================


class RequestInfo(BaseModel):
    """Metadata of the request that triggered the operation."""

    method: str = Field(..., description="HTTP method")
    path: str = Field(..., description="Request path")
    client: Optional[str] = Field(None, description="Client address")
    headers: Dict[str, str] = Field(default_factory=dict, description="Request headers")


class SystemInfo(BaseModel):
    """Identity of the host and runtime that served the request."""

    hostname: str = Field(..., description="Machine hostname")
    os_platform: str = Field(..., description="Operating system description")
    ip_address_v4: Optional[str] = Field(None, description="First IPv4 address of the host")
    ip_address_v6: Optional[str] = Field(None, description="First IPv6 address of the host")
    ip_addresses_all: Optional[str] = Field(None, description="Comma-separated host addresses")
    app_name: Optional[str] = Field(None, description="APP_NAME environment variable")
    python_version: str = Field(..., description="Interpreter version")
    fastapi_version: str = Field(..., description="FastAPI version")
    environment: Optional[str] = Field(None, description="Deployment environment")
    now: str = Field(..., description="Local time, ISO-8601")
    request: Optional[RequestInfo] = None


# =============================================================================
# Simulation Endpoint Schemas
# =============================================================================


class StressResultInfo(BaseModel):
    """What a stress generator did."""

    operation: str = Field(..., description="Generator name")
    requested_seconds: float = Field(..., description="Requested duration")
    elapsed_seconds: float = Field(..., description="Actual wall-clock duration")
    cancelled: bool = Field(False, description="True if shutdown cut the run short")
    workers: Optional[int] = None
    target_percent: Optional[int] = None
    size_mb: Optional[int] = None
    bytes_written: Optional[int] = None


class SimulationResponse(BaseModel):
    """Response body for every successful simulation endpoint."""

    result: Optional[StressResultInfo] = Field(None, description="Generator outcome")
    system: SystemInfo = Field(..., description="Diagnostic payload")


# =============================================================================
# Health Check Schemas
# =============================================================================


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    """Error detail."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    request_id: Optional[str] = Field(None, description="Request ID for tracing")
    details: Optional[Dict[str, Any]] = Field(None, description="Structured context")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail

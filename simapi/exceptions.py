"""
Typed exceptions for simapi.

Provides structured error handling with:
- SimapiError: Base exception for all simapi errors
- SimapiInputError: Nonsensical numeric input (negative size, duration, delay)
- SimapiResourceError: Allocation or disk write failed mid-operation
- InjectedFailure: The deliberate, recoverable failure of the fault injector

All exceptions include structured attributes for programmatic handling.
Process termination (crash/exit) is not modelled as an exception; see
simapi.stress.faults.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SimapiError(Exception):
    """Base exception for all simapi errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context as key-value pairs
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging or API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class SimapiInputError(SimapiError):
    """A numeric parameter is out of range and has no safe clamp.

    Raised when:
    - A duration, size or delay is negative
    - A guard rail configured on the server is exceeded

    Percentages and probabilities are clamped instead of rejected.

    Attributes:
        parameter: Name of the offending parameter
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        *,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if parameter:
            details["parameter"] = parameter
        if value is not None:
            details["value"] = value

        self.parameter = parameter
        self.value = value

        super().__init__(message, code=code, details=details)


class SimapiResourceError(SimapiError):
    """Allocation or disk write failed while a generator was running.

    Always raised after the generator has released everything it had
    acquired, so the caller never inherits a partial allocation.

    Attributes:
        resource: Which resource ran out ("memory", "disk")
        acquired_mb: How much had been acquired before the failure
    """

    def __init__(
        self,
        message: str,
        *,
        resource: Optional[str] = None,
        acquired_mb: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if resource:
            details["resource"] = resource
        if acquired_mb is not None:
            details["acquired_mb"] = acquired_mb

        self.resource = resource
        self.acquired_mb = acquired_mb

        super().__init__(message, code=code, details=details)


class InjectedFailure(SimapiError):
    """Deliberate recoverable failure produced by the fault injector.

    Never retried: the caller is supposed to observe it.

    Attributes:
        probability_percent: The configured firing probability
    """

    def __init__(
        self,
        message: str,
        *,
        probability_percent: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if probability_percent is not None:
            details["probability_percent"] = probability_percent

        self.probability_percent = probability_percent

        super().__init__(message, code=code, details=details)


__all__ = [
    "SimapiError",
    "SimapiInputError",
    "SimapiResourceError",
    "InjectedFailure",
]

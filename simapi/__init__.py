"""
simapi: controllable resource-stress and fault-injection service.

Core engine lives in simapi.stress; the HTTP surface in simapi.server.

Usage:
    from simapi import burn_cpu, hold_memory, raise_exception

    burn_cpu(5, 50)
    hold_memory(5, 256)

Server:
    uvicorn simapi.server:app
"""

from simapi.exceptions import (
    InjectedFailure,
    SimapiError,
    SimapiInputError,
    SimapiResourceError,
)
from simapi.stress import (
    StressResult,
    burn_cpu,
    crash_process,
    delay,
    delay_range,
    exit_process,
    fires,
    hold_memory,
    raise_exception,
    write_and_hold,
)

__version__ = "1.0.0"

__all__ = [
    "SimapiError",
    "SimapiInputError",
    "SimapiResourceError",
    "InjectedFailure",
    "StressResult",
    "fires",
    "delay",
    "delay_range",
    "burn_cpu",
    "hold_memory",
    "write_and_hold",
    "raise_exception",
    "crash_process",
    "exit_process",
    "__version__",
]

"""
Stress and fault operations for the HTTP context.

Runs the blocking generators from simapi.stress on a bounded thread pool so
the event loop stays responsive, enforces the configured guard rails before
anything is acquired, and translates engine errors into API errors.

A process-wide shutdown event is passed to every generator as its cancel
token: on app shutdown, in-flight holds end early and release their memory
and scratch files.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Dict, Optional

from simapi import stress, telemetry
from simapi.audit import get_audit_logger
from simapi.exceptions import InjectedFailure, SimapiInputError, SimapiResourceError
from simapi.server.config import get_settings
from simapi.server.exceptions import (
    InjectedFailureError,
    ResourceExhaustedError,
    ValidationError,
)
from simapi.server.middleware import get_request_id
from simapi.stress.result import StressResult

logger = logging.getLogger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()
_shutdown = threading.Event()


def get_executor() -> ThreadPoolExecutor:
    """Get thread pool executor for the blocking generators."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=get_settings().max_concurrency,
                thread_name_prefix="simapi-stress-",
            )
        return _executor


def shutdown_event() -> threading.Event:
    return _shutdown


def start() -> None:
    """Clear the shutdown token. Call on app startup."""
    _shutdown.clear()


def shutdown() -> None:
    """Cancel in-flight holds and stop the executor. Call on app shutdown."""
    global _executor
    _shutdown.set()
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=False)
            _executor = None


def _check_limit(name: str, value: int, limit: Optional[int]) -> None:
    if limit is not None and value > limit:
        raise ValidationError(
            f"{name}={value} exceeds the configured limit of {limit}",
            request_id=get_request_id(),
        )


def _max_delay_ms() -> Optional[int]:
    limit = get_settings().max_duration_seconds
    return limit * 1000 if limit is not None else None


async def _run(
    operation: str,
    fn: Callable[[], StressResult],
    parameters: Dict[str, Any],
) -> StressResult:
    request_id = get_request_id()
    audit = get_audit_logger()
    audit.log_stress_started(request_id, operation, parameters)
    loop = asyncio.get_running_loop()
    try:
        with telemetry.span(f"simapi.{operation}", **parameters):
            result = await loop.run_in_executor(get_executor(), fn)
    except SimapiInputError as e:
        audit.log_stress_failed(request_id, operation, "input_out_of_range")
        raise ValidationError(e.message, request_id=request_id) from e
    except SimapiResourceError as e:
        audit.log_stress_failed(request_id, operation, "resource_exhausted")
        logger.warning("%s failed: %s", operation, e.message)
        telemetry.log(
            "warning", "simapi.resource_exhausted", operation=operation, request_id=request_id
        )
        raise ResourceExhaustedError(e.message, request_id=request_id) from e
    except Exception:
        audit.log_stress_failed(request_id, operation, "internal")
        raise

    audit.log_stress_completed(request_id, operation, result.to_dict())
    return result


async def delay(ms: int) -> StressResult:
    _check_limit("ms", ms, _max_delay_ms())
    return await _run(
        "delay", partial(stress.delay, ms, _shutdown), {"ms": ms}
    )


async def delay_range(ms_min: int, ms_max: int) -> StressResult:
    _check_limit("ms_min", ms_min, _max_delay_ms())
    _check_limit("ms_max", ms_max, _max_delay_ms())
    return await _run(
        "delay",
        partial(stress.delay_range, ms_min, ms_max, _shutdown),
        {"ms_min": ms_min, "ms_max": ms_max},
    )


async def burn_cpu(seconds: int, percentage: int) -> StressResult:
    settings = get_settings()
    _check_limit("seconds", seconds, settings.max_duration_seconds)
    return await _run(
        "cpu",
        partial(
            stress.burn_cpu,
            seconds,
            percentage,
            workers=settings.cpu_workers,
            cancel=_shutdown,
            start_method=settings.cpu_start_method,
        ),
        {"seconds": seconds, "percentage": percentage},
    )


async def hold_memory(seconds: int, size_mb: int) -> StressResult:
    settings = get_settings()
    _check_limit("seconds", seconds, settings.max_duration_seconds)
    _check_limit("size_in_m", size_mb, settings.max_memory_mb)
    return await _run(
        "memory",
        partial(stress.hold_memory, seconds, size_mb, cancel=_shutdown),
        {"seconds": seconds, "size_mb": size_mb},
    )


async def write_and_hold(seconds: int, size_mb: int) -> StressResult:
    settings = get_settings()
    _check_limit("seconds", seconds, settings.max_duration_seconds)
    _check_limit("size_in_m", size_mb, settings.max_disk_mb)
    return await _run(
        "disk",
        partial(
            stress.write_and_hold,
            seconds,
            size_mb,
            scratch_dir=settings.scratch_dir,
            cancel=_shutdown,
        ),
        {"seconds": seconds, "size_mb": size_mb},
    )


def raise_exception(probability: int = 50) -> None:
    """Raise InjectedFailureError when the gate fires."""
    request_id = get_request_id()
    try:
        stress.raise_exception(probability)
    except InjectedFailure as e:
        get_audit_logger().log_fault_injected(
            request_id, "exception", e.probability_percent or 0
        )
        telemetry.log("warning", "simapi.injected_failure", request_id=request_id)
        raise InjectedFailureError(e.message, request_id=request_id) from e


def _terminate_hook(request_id: Optional[str]) -> Callable[[str], None]:
    def hook(mode: str) -> None:
        get_audit_logger().log_process_terminating(request_id, mode)
        telemetry.log("error", "simapi.terminating", mode=mode, request_id=request_id)
        for handler in logging.getLogger().handlers:
            handler.flush()

    return hook


def crash(probability: int = 50) -> None:
    """Abort the process when the gate fires; return otherwise."""
    stress.crash_process(
        probability, before_terminate=_terminate_hook(get_request_id())
    )


def exit_process() -> None:
    """Exit the process with status 0."""
    stress.exit_process(before_terminate=_terminate_hook(get_request_id()))

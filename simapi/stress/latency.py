"""
Timed latency injector and the shared non-busy hold primitive.

Every suspension here is a native timed wait (time.sleep or
threading.Event.wait); nothing spins and no lock is held while waiting.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from simapi.exceptions import SimapiInputError
from simapi.stress.probability import uniform_int
from simapi.stress.result import StressResult

logger = logging.getLogger(__name__)


def require_non_negative(name: str, value: int) -> int:
    """Reject negative durations, sizes and delays."""
    if value < 0:
        raise SimapiInputError(
            f"{name} must be >= 0, got {value}",
            parameter=name,
            value=value,
            code="input_out_of_range",
        )
    return int(value)


# Longest timeout Event.wait and time.sleep accept.
MAX_HOLD_SECONDS = threading.TIMEOUT_MAX


def require_duration(name: str, value: int, scale: int = 1) -> int:
    """
    Reject negative durations and ones too long to wait on.

    `scale` is the number of units per second (1000 for milliseconds).
    """
    value = require_non_negative(name, value)
    if value / scale > MAX_HOLD_SECONDS:
        raise SimapiInputError(
            f"{name} must be at most {int(MAX_HOLD_SECONDS * scale)}, got {value}",
            parameter=name,
            value=value,
            code="input_out_of_range",
        )
    return value


def hold(seconds: float, cancel: Optional[threading.Event] = None) -> bool:
    """
    Suspend the calling thread for `seconds`.

    Returns:
        True if `cancel` was set before the hold completed.
    """
    if seconds <= 0:
        return bool(cancel is not None and cancel.is_set())
    if cancel is None:
        time.sleep(seconds)
        return False
    return cancel.wait(seconds)


def delay(ms: int, cancel: Optional[threading.Event] = None) -> StressResult:
    """
    Suspend the caller for exactly `ms` milliseconds.

    Raises:
        SimapiInputError: If ms is negative.
    """
    ms = require_duration("ms", ms, scale=1000)
    start = time.monotonic()
    logger.debug("Delaying for %d ms", ms)
    cancelled = hold(ms / 1000.0, cancel)
    return StressResult(
        operation="delay",
        requested_seconds=ms / 1000.0,
        elapsed_seconds=time.monotonic() - start,
        cancelled=cancelled,
    )


def pick_delay_ms(ms_min: int, ms_max: int) -> int:
    """
    Choose a delay in [ms_min, ms_max).

    A degenerate or inverted range (ms_max <= ms_min) clamps to ms_min.
    """
    ms_min = require_duration("ms_min", ms_min, scale=1000)
    if ms_max <= ms_min:
        return ms_min
    return uniform_int(ms_min, ms_max)


def delay_range(
    ms_min: int, ms_max: int, cancel: Optional[threading.Event] = None
) -> StressResult:
    """Suspend the caller for a uniformly chosen delay in [ms_min, ms_max)."""
    return delay(pick_delay_ms(ms_min, ms_max), cancel)

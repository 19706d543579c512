"""
CPU load generator: duty-cycled busy/idle workers across every core.

Each worker repeats a 100 ms window: spin for `busy_ms`, sleep for
`idle_ms`, reset its stopwatch. All workers of one invocation share a single
read-only deadline computed at entry, so the system-wide utilization
approximates the target without a central scheduler.

Workers are processes, not threads: busy phases hold the interpreter lock,
so threads would serialize onto a single core.

Usage:
    from simapi.stress.cpu import burn_cpu

    result = burn_cpu(10, 50)  # ~50% on every core for 10 seconds
"""

from __future__ import annotations

import logging
import multiprocessing
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, List, Optional

from simapi.stress.latency import require_duration
from simapi.stress.probability import clamp_percent
from simapi.stress.result import StressResult

logger = logging.getLogger(__name__)

WINDOW_MS = 100

# Seconds a worker gets to notice the stop event before it is terminated.
JOIN_GRACE_SECONDS = 2.0


@dataclass(frozen=True)
class DutyCycle:
    """
    Busy/idle split of one 100 ms window.

    Attributes:
        busy_ms: Milliseconds to spin per window.
        idle_ms: Milliseconds to sleep per window.
    """

    busy_ms: int
    idle_ms: int

    @classmethod
    def for_percent(cls, target_percent: int) -> "DutyCycle":
        """Build the cycle for a target utilization, clamped to [0, 100]."""
        busy = clamp_percent(target_percent) * WINDOW_MS // 100
        return cls(busy_ms=busy, idle_ms=WINDOW_MS - busy)

    @property
    def percent(self) -> int:
        return self.busy_ms * 100 // WINDOW_MS


def run_duty_cycle(cycle: DutyCycle, deadline: float, stop: Optional[Any] = None) -> None:
    """
    Alternate busy and idle phases until `deadline` (time.monotonic()).

    `stop` is any event-like object with is_set()/wait(); it is checked once
    per window so the spin itself stays cheap.
    """
    busy_s = cycle.busy_ms / 1000.0
    idle_s = cycle.idle_ms / 1000.0
    watch = time.perf_counter()
    while time.monotonic() < deadline:
        if time.perf_counter() - watch < busy_s:
            continue
        if stop is not None and stop.is_set():
            return
        if idle_s > 0:
            pause = min(idle_s, max(0.0, deadline - time.monotonic()))
            if stop is not None:
                if stop.wait(pause):
                    return
            else:
                time.sleep(pause)
        watch = time.perf_counter()


def _worker(cycle: DutyCycle, deadline: float, stop: Any) -> None:
    # time.monotonic() is system-wide, so the parent's deadline holds here.
    run_duty_cycle(cycle, deadline, stop)


def default_workers() -> int:
    return os.cpu_count() or 1


def burn_cpu(
    duration_seconds: int,
    target_percent: int,
    *,
    workers: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
    start_method: str = "spawn",
) -> StressResult:
    """
    Drive every core at roughly `target_percent` for `duration_seconds`.

    Blocks until all workers have exited. The stop event is set and every
    worker joined on every exit path, so none outlives the call.

    Args:
        duration_seconds: Wall-clock bound, measured from entry.
        target_percent: Utilization target, clamped to [0, 100].
        workers: Worker count (default: logical core count).
        cancel: Optional token; when set, workers stop at their next window.
        start_method: multiprocessing start method.

    Raises:
        SimapiInputError: If duration_seconds is negative.
    """
    duration_seconds = require_duration("duration_seconds", duration_seconds)
    cycle = DutyCycle.for_percent(target_percent)
    count = workers if workers and workers > 0 else default_workers()

    start = time.monotonic()
    deadline = start + duration_seconds
    ctx = multiprocessing.get_context(start_method)
    stop = ctx.Event()
    procs: List[Any] = []
    cancelled = False

    logger.info(
        "Burning CPU: %d workers at %d%% for %ds", count, cycle.percent, duration_seconds
    )
    try:
        for i in range(count):
            proc = ctx.Process(
                target=_worker,
                args=(cycle, deadline, stop),
                name=f"simapi-cpu-{i}",
                daemon=True,
            )
            proc.start()
            procs.append(proc)

        if cancel is not None and cancel.wait(max(0.0, deadline - time.monotonic())):
            cancelled = True
            stop.set()

        for proc in procs:
            proc.join()
    finally:
        stop.set()
        for proc in procs:
            proc.join(JOIN_GRACE_SECONDS)
            if proc.is_alive():
                logger.warning("CPU worker %s did not stop, terminating", proc.name)
                proc.terminate()
                proc.join()

    elapsed = time.monotonic() - start
    logger.info("CPU burn finished after %.2fs (cancelled=%s)", elapsed, cancelled)
    return StressResult(
        operation="cpu",
        requested_seconds=duration_seconds,
        elapsed_seconds=elapsed,
        cancelled=cancelled,
        workers=count,
        target_percent=cycle.percent,
    )

"""
Fault injector: recoverable failures and process termination.

raise_exception() is the recoverable path and surfaces as an ordinary
exception. crash_process() and exit_process() end the process and never
return when they fire; they are plain calls, not exceptions, so no handler
or finally block can intercept them.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Optional

from simapi.exceptions import InjectedFailure
from simapi.stress.probability import clamp_percent, fires

logger = logging.getLogger(__name__)

TerminateHook = Callable[[str], None]


def raise_exception(probability_percent: int = 100) -> None:
    """
    Raise InjectedFailure with the given probability.

    Returns normally when the gate does not fire.
    """
    probability = clamp_percent(probability_percent)
    if not fires(probability):
        logger.info("Exception gate did not fire (probability=%d%%)", probability)
        return
    logger.warning("Injecting exception (probability=%d%%)", probability)
    raise InjectedFailure(
        f"Exception simulation (probability {probability}%).",
        probability_percent=probability,
        code="injected_failure",
    )


def _flush_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError, AttributeError):
            pass


def crash_process(
    probability_percent: int = 100,
    before_terminate: Optional[TerminateHook] = None,
) -> None:
    """
    Abort the process with the given probability.

    os.abort() raises SIGABRT: no unwinding, no atexit handlers, no response.
    Returns normally when the gate does not fire.

    Args:
        probability_percent: Firing probability, clamped to [0, 100].
        before_terminate: Called with "crash" right before the abort.
    """
    probability = clamp_percent(probability_percent)
    if not fires(probability):
        logger.info("Crash gate did not fire (probability=%d%%)", probability)
        return
    logger.critical("Application crash simulation (probability=%d%%)", probability)
    if before_terminate is not None:
        before_terminate("crash")
    _flush_streams()
    os.abort()


def exit_process(before_terminate: Optional[TerminateHook] = None) -> None:
    """
    Exit the process with status 0, skipping the response path.

    Args:
        before_terminate: Called with "exit" right before exiting.
    """
    logger.warning("Application exit simulation")
    if before_terminate is not None:
        before_terminate("exit")
    _flush_streams()
    os._exit(0)

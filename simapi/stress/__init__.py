"""
Resource-stress and fault-injection engine.

Consume a bounded amount of CPU, memory, disk or time, or fail on purpose.
Every generator blocks until its work is done and releases whatever it
acquired before returning.

Usage:
    from simapi.stress import burn_cpu, hold_memory, write_and_hold, delay

    burn_cpu(10, 50)           # ~50% of every core for 10 seconds
    hold_memory(10, 512)       # hold 512 MiB for 10 seconds
    write_and_hold(10, 1024)   # 1 GiB scratch file for 10 seconds
    delay(3000)                # sleep 3 seconds
"""

from simapi.stress.probability import clamp_percent, fires
from simapi.stress.result import StressResult
from simapi.stress.latency import delay, delay_range, hold
from simapi.stress.cpu import DutyCycle, burn_cpu, run_duty_cycle
from simapi.stress.memory import BLOCK_SIZE, hold_memory
from simapi.stress.disk import write_and_hold
from simapi.stress.faults import crash_process, exit_process, raise_exception

__all__ = [
    "clamp_percent",
    "fires",
    "StressResult",
    "delay",
    "delay_range",
    "hold",
    "DutyCycle",
    "burn_cpu",
    "run_duty_cycle",
    "BLOCK_SIZE",
    "hold_memory",
    "write_and_hold",
    "raise_exception",
    "crash_process",
    "exit_process",
]

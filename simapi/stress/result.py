"""
Result type shared by the stress generators.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class StressResult:
    """
    Outcome of one generator invocation.

    Attributes:
        operation: Generator name ("delay", "cpu", "memory", "disk").
        requested_seconds: Hold/run duration the caller asked for.
        elapsed_seconds: Wall-clock time the call actually took.
        cancelled: True if a cancel token cut the run short.
        workers: CPU worker processes used (cpu only).
        target_percent: Clamped duty-cycle target (cpu only).
        size_mb: MiB allocated or written (memory, disk).
        bytes_written: Bytes flushed to the scratch file (disk only).
        path: Scratch file path, already deleted when returned (disk only).
    """

    operation: str
    requested_seconds: float
    elapsed_seconds: float
    cancelled: bool = False
    workers: Optional[int] = None
    target_percent: Optional[int] = None
    size_mb: Optional[int] = None
    bytes_written: Optional[int] = None
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

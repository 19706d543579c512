"""
Audit logging for stress and fault-injection requests.

Structured JSON lines describing what the service did to its own process:
- Request lifecycle events (submitted, completed, failed)
- Stress runs (operation, parameters, elapsed time, cancellation)
- Injected faults and imminent process termination

Only request IDs, paths and numeric parameters are logged; request headers
and bodies are not.

Usage:
    from simapi.audit import get_audit_logger

    audit = get_audit_logger()
    audit.log_stress_started(request_id, "cpu", {"seconds": 10, "percent": 50})

Configuration:
    from simapi.audit import configure_audit_logger

    # Log to file (production)
    configure_audit_logger(output_path="/var/log/simapi/audit.json")

    # Log to stdout (development)
    configure_audit_logger(output_path=None)
"""

from __future__ import annotations

import json
import logging
import sys
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of audit events."""

    # Request lifecycle
    REQUEST_SUBMITTED = "request_submitted"
    REQUEST_COMPLETED = "request_completed"
    REQUEST_FAILED = "request_failed"

    # Stress generators
    STRESS_STARTED = "stress_started"
    STRESS_COMPLETED = "stress_completed"
    STRESS_FAILED = "stress_failed"

    # Fault injector
    FAULT_INJECTED = "fault_injected"
    PROCESS_TERMINATING = "process_terminating"


@dataclass
class AuditEvent:
    """Structured audit event."""

    event_type: AuditEventType
    timestamp_unix: float = field(default_factory=time.time)

    request_id: Optional[str] = None
    path: Optional[str] = None
    operation: Optional[str] = None

    execution_time_ms: Optional[float] = None
    status_code: Optional[int] = None

    # Error classification (category only, never the message)
    error_category: Optional[str] = None

    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        data: Dict[str, Any] = {
            "event": self.event_type.value,
            "ts": self.timestamp_unix,
        }

        if self.request_id:
            data["request_id"] = self.request_id
        if self.path:
            data["path"] = self.path
        if self.operation:
            data["operation"] = self.operation
        if self.execution_time_ms is not None:
            data["execution_time_ms"] = self.execution_time_ms
        if self.status_code is not None:
            data["status_code"] = self.status_code
        if self.error_category:
            data["error_category"] = self.error_category
        if self.metadata:
            data["metadata"] = self.metadata

        return data


class AuditLogger:
    """
    Thread-safe buffered audit logger.

    Writes structured JSON events to a file or stdout. Events are buffered
    and flushed when the buffer fills or the flush interval elapses;
    flush() forces a write, which matters right before the process is
    deliberately terminated.
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        buffer_size: int = 100,
        flush_interval_seconds: float = 1.0,
        include_timestamps: bool = True,
        enabled: bool = True,
    ) -> None:
        """
        Args:
            output_path: Path to log file. None = stdout.
            buffer_size: Events to buffer before flush.
            flush_interval_seconds: Max time between flushes.
            include_timestamps: Include ISO timestamp in addition to unix.
            enabled: When False, events are counted but not written.
        """
        self._output_path = output_path
        self._buffer_size = buffer_size
        self._flush_interval = flush_interval_seconds
        self._include_timestamps = include_timestamps
        self._enabled = enabled

        self._buffer: List[str] = []
        self._lock = threading.Lock()
        self._last_flush = time.time()

        # Opened lazily
        self._file: Optional[TextIO] = None

        self._events_logged = 0
        self._events_dropped = 0

    def _get_file(self) -> TextIO:
        if self._file is None:
            if self._output_path:
                Path(self._output_path).parent.mkdir(parents=True, exist_ok=True)
                self._file = open(self._output_path, "a", encoding="utf-8")
            else:
                self._file = sys.stdout
        return self._file

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        data = event.to_dict()
        if self._include_timestamps:
            data["timestamp"] = (
                datetime.fromtimestamp(event.timestamp_unix, tz=timezone.utc)
                .isoformat()
                .replace("+00:00", "Z")
            )

        line = json.dumps(data, separators=(",", ":"))

        with self._lock:
            self._events_logged += 1
            if not self._enabled:
                return
            self._buffer.append(line)
            should_flush = (
                len(self._buffer) >= self._buffer_size
                or time.time() - self._last_flush >= self._flush_interval
            )

        if should_flush:
            self.flush()

    def flush(self) -> None:
        """Write buffered events out."""
        with self._lock:
            if not self._buffer:
                return

            lines = self._buffer.copy()
            self._buffer.clear()
            self._last_flush = time.time()

        try:
            f = self._get_file()
            for line in lines:
                f.write(line + "\n")
            f.flush()
        except (OSError, ValueError) as e:
            logger.error("Audit log flush failed: %s", e)
            with self._lock:
                self._events_dropped += len(lines)

    def close(self) -> None:
        """Flush and close log file."""
        self.flush()
        with self._lock:
            if self._file and self._output_path:
                try:
                    self._file.close()
                except OSError:
                    pass
                self._file = None

    # Convenience methods for common events

    def log_request_submitted(self, request_id: str, path: str) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.REQUEST_SUBMITTED,
                request_id=request_id,
                path=path,
            )
        )

    def log_request_completed(
        self,
        request_id: str,
        execution_time_ms: float,
        status_code: int = 200,
    ) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.REQUEST_COMPLETED,
                request_id=request_id,
                execution_time_ms=execution_time_ms,
                status_code=status_code,
            )
        )

    def log_request_failed(
        self,
        request_id: str,
        error_category: str,
        execution_time_ms: Optional[float] = None,
        status_code: Optional[int] = None,
    ) -> None:
        """Log request failure (category only, no error content)."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.REQUEST_FAILED,
                request_id=request_id,
                error_category=error_category,
                execution_time_ms=execution_time_ms,
                status_code=status_code,
            )
        )

    def log_stress_started(
        self,
        request_id: Optional[str],
        operation: str,
        parameters: Dict[str, Any],
    ) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.STRESS_STARTED,
                request_id=request_id,
                operation=operation,
                metadata=dict(parameters),
            )
        )

    def log_stress_completed(
        self,
        request_id: Optional[str],
        operation: str,
        result: Dict[str, Any],
    ) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.STRESS_COMPLETED,
                request_id=request_id,
                operation=operation,
                execution_time_ms=result.get("elapsed_seconds", 0.0) * 1000,
                metadata=dict(result),
            )
        )

    def log_stress_failed(
        self,
        request_id: Optional[str],
        operation: str,
        error_category: str,
    ) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.STRESS_FAILED,
                request_id=request_id,
                operation=operation,
                error_category=error_category,
            )
        )

    def log_fault_injected(
        self,
        request_id: Optional[str],
        fault: str,
        probability_percent: int,
    ) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.FAULT_INJECTED,
                request_id=request_id,
                operation=fault,
                metadata={"probability_percent": probability_percent},
            )
        )

    def log_process_terminating(self, request_id: Optional[str], mode: str) -> None:
        """Log and flush immediately: the process is about to end."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.PROCESS_TERMINATING,
                request_id=request_id,
                operation=mode,
            )
        )
        self.flush()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "events_logged": self._events_logged,
                "events_dropped": self._events_dropped,
                "buffer_size": len(self._buffer),
            }


# Global singleton
_global_audit_logger: Optional[AuditLogger] = None
_global_lock = threading.Lock()


def get_audit_logger() -> AuditLogger:
    """
    Get the global audit logger.

    Creates with default settings (stdout) if not configured.
    """
    global _global_audit_logger
    if _global_audit_logger is None:
        with _global_lock:
            if _global_audit_logger is None:
                _global_audit_logger = AuditLogger()
    assert _global_audit_logger is not None
    return _global_audit_logger


def configure_audit_logger(
    output_path: Optional[str] = None,
    buffer_size: int = 100,
    flush_interval_seconds: float = 1.0,
    include_timestamps: bool = True,
    enabled: bool = True,
) -> AuditLogger:
    """
    Configure the global audit logger.

    Call at startup before processing requests.
    """
    global _global_audit_logger

    with _global_lock:
        if _global_audit_logger is not None:
            _global_audit_logger.close()

        _global_audit_logger = AuditLogger(
            output_path=output_path,
            buffer_size=buffer_size,
            flush_interval_seconds=flush_interval_seconds,
            include_timestamps=include_timestamps,
            enabled=enabled,
        )
        return _global_audit_logger


def reset_audit_logger() -> None:
    """Reset global audit logger. For testing only."""
    global _global_audit_logger
    with _global_lock:
        if _global_audit_logger is not None:
            _global_audit_logger.close()
        _global_audit_logger = None

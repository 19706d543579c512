"""
Optional Logfire spans and events for the simulation service.

Everything here is a no-op unless the `telemetry` extra is installed and
SIMAPI_LOGFIRE is not switched off. SIMAPI_TELEMETRY_STDERR=1 mirrors
events to stderr whether or not Logfire is active.
"""
from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator

_TRUTHY = {"1", "true", "yes", "on"}

_logfire: Any = None
_configured = False


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _backend() -> Any:
    """The logfire module, or False when it is not installed."""
    global _logfire
    if _logfire is None:
        try:
            import logfire
        except ImportError:
            logfire = False
        _logfire = logfire
    return _logfire


def enabled() -> bool:
    return bool(_backend()) and _flag("SIMAPI_LOGFIRE", True)


def _ready() -> bool:
    global _configured
    if not enabled():
        return False
    if not _configured:
        try:
            _backend().configure(
                console=None if _flag("SIMAPI_LOGFIRE_CONSOLE", True) else False,
                service_name="simapi",
                send_to_logfire="if-token-present",
            )
        except Exception:
            return False
        _configured = True
    return True


def instrument_app(app: Any) -> bool:
    """Record each request to `app` as a span."""
    if not _ready():
        return False
    try:
        _backend().instrument_fastapi(app)
    except Exception:
        return False
    return True


@contextmanager
def span(name: str, **attrs: Any) -> Iterator[None]:
    """Wrap one generator run; exceptions pass through unchanged."""
    if not _ready():
        yield
        return
    with _backend().span(name, **attrs):
        yield


def log(level: str, message: str, **attrs: Any) -> None:
    if _flag("SIMAPI_TELEMETRY_STDERR", False):
        print(f"[telemetry] {message} {attrs}", file=sys.stderr)
    if not _ready():
        return
    backend = _backend()
    emit = getattr(backend, level, None) or backend.info
    try:
        emit(message, **attrs)
    except Exception:
        return

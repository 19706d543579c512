"""Pytest configuration shared by the simapi test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in sys.path for proper imports with pytest-xdist
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from simapi.audit import configure_audit_logger, reset_audit_logger  # noqa: E402
from simapi.server.config import reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_singletons():
    """Fresh settings and a silent audit logger for every test."""
    reset_settings()
    configure_audit_logger(enabled=False)
    yield
    reset_audit_logger()
    reset_settings()


@pytest.fixture
def anyio_backend():
    """The async tests drive asyncio directly, so run them on asyncio only."""
    return "asyncio"

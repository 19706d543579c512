"""
Server configuration from environment variables.

Usage:
    from simapi.server.config import get_settings

    settings = get_settings()
    print(settings.host, settings.port)
"""

from functools import lru_cache
from typing import Optional
import os


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Server configuration loaded from environment variables."""

    def __init__(self) -> None:
        # Server
        self.host: str = os.getenv("SIMAPI_HOST", "0.0.0.0")
        self.port: int = int(os.getenv("SIMAPI_PORT", "8080"))
        self.max_concurrency: int = int(os.getenv("SIMAPI_MAX_CONCURRENCY", "32"))

        # Diagnostic payload
        self.app_name: Optional[str] = os.getenv("APP_NAME")
        self.environment: Optional[str] = os.getenv("SIMAPI_ENV")

        # Guard rails (None = unlimited)
        self.max_duration_seconds: Optional[int] = _optional_int(
            "SIMAPI_MAX_DURATION_SECONDS"
        )
        self.max_memory_mb: Optional[int] = _optional_int("SIMAPI_MAX_MEMORY_MB")
        self.max_disk_mb: Optional[int] = _optional_int("SIMAPI_MAX_DISK_MB")

        # Generators
        self.scratch_dir: Optional[str] = os.getenv("SIMAPI_SCRATCH_DIR") or None
        self.cpu_workers: Optional[int] = _optional_int("SIMAPI_CPU_WORKERS")
        self.cpu_start_method: str = os.getenv("SIMAPI_CPU_START_METHOD", "spawn")

        # Audit logging
        self.audit_enabled: bool = _flag("SIMAPI_AUDIT_ENABLED", True)
        self.audit_log_path: Optional[str] = os.getenv("SIMAPI_AUDIT_LOG_PATH")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Clear settings cache. For testing only."""
    get_settings.cache_clear()

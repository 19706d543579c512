"""Tests for environment-driven server settings."""

from simapi.server.config import get_settings, reset_settings


def test_defaults(monkeypatch):
    for name in (
        "SIMAPI_PORT",
        "SIMAPI_MAX_DURATION_SECONDS",
        "SIMAPI_MAX_MEMORY_MB",
        "SIMAPI_SCRATCH_DIR",
        "SIMAPI_CPU_WORKERS",
        "SIMAPI_CPU_START_METHOD",
        "SIMAPI_AUDIT_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()

    settings = get_settings()
    assert settings.port == 8080
    assert settings.max_duration_seconds is None
    assert settings.max_memory_mb is None
    assert settings.scratch_dir is None
    assert settings.cpu_workers is None
    assert settings.cpu_start_method == "spawn"
    assert settings.audit_enabled is True


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SIMAPI_PORT", "9000")
    monkeypatch.setenv("SIMAPI_MAX_DURATION_SECONDS", "60")
    monkeypatch.setenv("SIMAPI_MAX_DISK_MB", "512")
    monkeypatch.setenv("SIMAPI_SCRATCH_DIR", str(tmp_path))
    monkeypatch.setenv("SIMAPI_CPU_WORKERS", "3")
    monkeypatch.setenv("SIMAPI_AUDIT_ENABLED", "off")
    monkeypatch.setenv("APP_NAME", "checkout-canary")
    reset_settings()

    settings = get_settings()
    assert settings.port == 9000
    assert settings.max_duration_seconds == 60
    assert settings.max_disk_mb == 512
    assert settings.scratch_dir == str(tmp_path)
    assert settings.cpu_workers == 3
    assert settings.audit_enabled is False
    assert settings.app_name == "checkout-canary"


def test_settings_are_cached_until_reset(monkeypatch):
    monkeypatch.setenv("SIMAPI_PORT", "9001")
    reset_settings()
    first = get_settings()
    monkeypatch.setenv("SIMAPI_PORT", "9002")
    assert get_settings() is first
    reset_settings()
    assert get_settings().port == 9002

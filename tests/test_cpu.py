"""Tests for the duty-cycled CPU load generator."""

import multiprocessing
import os
import sys
import threading
import time

import pytest

from simapi.exceptions import SimapiInputError
from simapi.stress.cpu import DutyCycle, burn_cpu, run_duty_cycle


def _children_cpu_seconds() -> float:
    psutil = pytest.importorskip("psutil")
    times = psutil.Process().cpu_times()
    return times.children_user + times.children_system


class TestDutyCycle:
    @pytest.mark.parametrize(
        "percent,busy,idle",
        [(50, 50, 50), (100, 100, 0), (0, 0, 100), (150, 100, 0), (-20, 0, 100)],
    )
    def test_for_percent(self, percent, busy, idle):
        cycle = DutyCycle.for_percent(percent)
        assert (cycle.busy_ms, cycle.idle_ms) == (busy, idle)
        assert cycle.busy_ms + cycle.idle_ms == 100

    def test_percent_property(self):
        assert DutyCycle.for_percent(30).percent == 30


class TestRunDutyCycle:
    """The primitive runs in-process here, so time.process_time() sees it."""

    def test_returns_at_deadline(self):
        start = time.monotonic()
        run_duty_cycle(DutyCycle.for_percent(50), start + 0.3)
        elapsed = time.monotonic() - start
        assert 0.3 <= elapsed < 0.5

    def test_zero_percent_is_idle(self):
        cpu_before = time.process_time()
        run_duty_cycle(DutyCycle.for_percent(0), time.monotonic() + 0.5)
        assert time.process_time() - cpu_before < 0.1

    def test_full_percent_spins(self):
        cpu_before = time.process_time()
        run_duty_cycle(DutyCycle.for_percent(100), time.monotonic() + 0.3)
        assert time.process_time() - cpu_before > 0.2

    def test_half_percent_sits_between(self):
        cpu_before = time.process_time()
        run_duty_cycle(DutyCycle.for_percent(50), time.monotonic() + 1.0)
        used = time.process_time() - cpu_before
        assert 0.25 < used < 0.8

    def test_stop_event_ends_early(self):
        stop = threading.Event()
        stop.set()
        start = time.monotonic()
        run_duty_cycle(DutyCycle.for_percent(50), start + 5.0, stop)
        assert time.monotonic() - start < 0.5


class TestBurnCpu:
    def test_negative_duration_rejected(self):
        with pytest.raises(SimapiInputError):
            burn_cpu(-1, 50)

    def test_too_long_duration_rejected_before_spawning(self, monkeypatch):
        def no_spawn(*args, **kwargs):
            raise AssertionError("workers started")

        monkeypatch.setattr(multiprocessing, "get_context", no_spawn)
        with pytest.raises(SimapiInputError):
            burn_cpu(10**12, 50, workers=1, cancel=threading.Event())

    def test_zero_duration_returns(self):
        result = burn_cpu(0, 250, workers=2)
        assert result.operation == "cpu"
        assert result.workers == 2
        assert result.target_percent == 100
        assert result.cancelled is False

    @pytest.mark.slow
    def test_defaults_to_core_count(self):
        result = burn_cpu(0, 0)
        assert result.workers == (os.cpu_count() or 1)

    @pytest.mark.slow
    def test_returns_only_after_duration(self):
        start = time.monotonic()
        burn_cpu(1, 100, workers=1)
        assert time.monotonic() - start >= 1.0

    @pytest.mark.slow
    @pytest.mark.skipif(sys.platform != "linux", reason="children CPU times are Linux-only")
    def test_full_load_burns_and_zero_load_idles(self):
        workers = min(2, os.cpu_count() or 1)

        before = _children_cpu_seconds()
        burn_cpu(1, 0, workers=workers)
        idle_cpu = _children_cpu_seconds() - before

        before = _children_cpu_seconds()
        burn_cpu(1, 100, workers=workers)
        busy_cpu = _children_cpu_seconds() - before

        assert idle_cpu < 0.3 * workers
        assert busy_cpu > 0.6 * workers
        assert busy_cpu > idle_cpu * 2

    @pytest.mark.slow
    @pytest.mark.skipif(sys.platform != "linux", reason="children CPU times are Linux-only")
    def test_half_load_sits_in_mid_band(self):
        workers = min(2, os.cpu_count() or 1)

        before = _children_cpu_seconds()
        burn_cpu(2, 50, workers=workers)
        used = _children_cpu_seconds() - before

        # Two seconds per worker is full load; 50% should land near one.
        utilization = used / (2.0 * workers)
        assert 0.3 <= utilization <= 0.7

    @pytest.mark.slow
    def test_cancel_stops_workers(self):
        cancel = threading.Event()
        threading.Timer(0.5, cancel.set).start()
        result = burn_cpu(30, 50, workers=1, cancel=cancel)
        assert result.cancelled is True
        assert result.elapsed_seconds < 5.0

"""Tests for the memory pressure generator."""

import threading
import time

import pytest

from simapi.exceptions import SimapiInputError, SimapiResourceError
from simapi.stress import memory as memory_module
from simapi.stress.memory import BLOCK_SIZE, hold_memory

MIB = 1024 * 1024


@pytest.fixture
def tracked_blocks(monkeypatch):
    """Record every block the generator allocates."""
    blocks = []
    real_allocate = memory_module.allocate_block

    def allocate():
        block = real_allocate()
        blocks.append(block)
        return block

    monkeypatch.setattr(memory_module, "allocate_block", allocate)
    return blocks


class TestHoldMemory:
    def test_block_size_is_one_mib(self):
        assert BLOCK_SIZE == MIB

    def test_allocates_requested_blocks(self, tracked_blocks):
        result = hold_memory(0, 4)

        assert result.operation == "memory"
        assert result.size_mb == 4
        assert result.cancelled is False
        assert len(tracked_blocks) == 4

    def test_every_block_released_on_success(self, tracked_blocks):
        hold_memory(0, 3)
        assert tracked_blocks
        assert all(block.closed for block in tracked_blocks)

    def test_blocks_are_filled(self, monkeypatch):
        seen = []
        real_release = memory_module.release_blocks

        def inspect_then_release(blocks):
            seen.extend(block[:4] for block in blocks)
            real_release(blocks)

        monkeypatch.setattr(memory_module, "release_blocks", inspect_then_release)
        hold_memory(0, 2)
        assert seen == [b"\xa5" * 4, b"\xa5" * 4]

    def test_zero_size_is_allowed(self, tracked_blocks):
        result = hold_memory(0, 0)
        assert result.size_mb == 0
        assert tracked_blocks == []

    @pytest.mark.parametrize("seconds,size", [(-1, 1), (0, -1)])
    def test_negative_input_rejected(self, seconds, size, tracked_blocks):
        with pytest.raises(SimapiInputError):
            hold_memory(seconds, size)
        assert tracked_blocks == []

    def test_too_long_hold_rejected_before_allocating(self, tracked_blocks):
        with pytest.raises(SimapiInputError) as exc_info:
            hold_memory(10**12, 4, cancel=threading.Event())
        assert exc_info.value.parameter == "duration_seconds"
        assert tracked_blocks == []

    def test_partial_allocation_released_on_failure(self, monkeypatch):
        blocks = []
        real_allocate = memory_module.allocate_block

        def allocate():
            if len(blocks) == 3:
                raise MemoryError()
            block = real_allocate()
            blocks.append(block)
            return block

        monkeypatch.setattr(memory_module, "allocate_block", allocate)

        with pytest.raises(SimapiResourceError) as exc_info:
            hold_memory(10, 8)

        err = exc_info.value
        assert err.resource == "memory"
        assert err.acquired_mb == 3
        assert err.code == "resource_exhausted"
        assert isinstance(err.__cause__, MemoryError)
        assert len(blocks) == 3
        assert all(block.closed for block in blocks)

    def test_cancel_releases_early(self, tracked_blocks):
        cancel = threading.Event()
        threading.Timer(0.1, cancel.set).start()

        result = hold_memory(30, 2, cancel=cancel)

        assert result.cancelled is True
        assert result.elapsed_seconds < 2.0
        assert all(block.closed for block in tracked_blocks)

    def test_holds_for_duration(self):
        result = hold_memory(1, 1)
        assert result.elapsed_seconds >= 0.99


@pytest.mark.slow
def test_rss_returns_to_baseline():
    psutil = pytest.importorskip("psutil")
    proc = psutil.Process()
    size_mb = 128

    baseline = proc.memory_info().rss
    worker = threading.Thread(target=hold_memory, args=(1, size_mb))
    worker.start()
    time.sleep(0.6)
    peak = proc.memory_info().rss
    worker.join()
    after = proc.memory_info().rss

    assert peak - baseline > (size_mb // 2) * MIB
    assert after - baseline < 16 * MIB

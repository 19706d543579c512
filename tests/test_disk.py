"""Tests for the disk pressure generator."""

import errno
import os
import threading
import time

import pytest

from simapi.exceptions import SimapiInputError, SimapiResourceError
from simapi.stress.disk import FILE_PREFIX, MIB, write_and_hold


class TestWriteAndHold:
    def test_writes_requested_size_then_deletes(self, tmp_path):
        result = write_and_hold(0, 2, scratch_dir=str(tmp_path))

        assert result.operation == "disk"
        assert result.size_mb == 2
        assert result.bytes_written == 2 * MIB
        assert os.path.basename(result.path).startswith(FILE_PREFIX)
        assert not os.path.exists(result.path)
        assert list(tmp_path.iterdir()) == []

    def test_file_present_during_hold(self, tmp_path):
        worker = threading.Thread(
            target=write_and_hold, args=(1, 1), kwargs={"scratch_dir": str(tmp_path)}
        )
        worker.start()

        sizes = []
        deadline = time.monotonic() + 0.9
        while time.monotonic() < deadline and MIB not in sizes:
            sizes = [p.stat().st_size for p in tmp_path.iterdir()]
            time.sleep(0.02)
        worker.join()

        assert MIB in sizes
        assert list(tmp_path.iterdir()) == []

    def test_custom_chunk_size(self, tmp_path):
        result = write_and_hold(0, 2, scratch_dir=str(tmp_path), chunk_size=64 * 1024)
        assert result.bytes_written == 2 * MIB

    @pytest.mark.parametrize("chunk_size", [0, -8, 1000])
    def test_invalid_chunk_size_rejected(self, tmp_path, chunk_size):
        with pytest.raises(SimapiInputError):
            write_and_hold(0, 1, scratch_dir=str(tmp_path), chunk_size=chunk_size)
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.parametrize("seconds,size", [(-1, 1), (0, -1)])
    def test_negative_input_rejected(self, tmp_path, seconds, size):
        with pytest.raises(SimapiInputError):
            write_and_hold(seconds, size, scratch_dir=str(tmp_path))
        assert list(tmp_path.iterdir()) == []

    def test_too_long_hold_rejected_before_writing(self, tmp_path):
        with pytest.raises(SimapiInputError):
            write_and_hold(10**12, 1, scratch_dir=str(tmp_path), cancel=threading.Event())
        assert list(tmp_path.iterdir()) == []

    def test_write_failure_deletes_file(self, tmp_path, monkeypatch):
        def disk_full(fd):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(os, "fsync", disk_full)

        with pytest.raises(SimapiResourceError) as exc_info:
            write_and_hold(10, 1, scratch_dir=str(tmp_path))

        assert exc_info.value.resource == "disk"
        assert exc_info.value.code == "resource_exhausted"
        assert list(tmp_path.iterdir()) == []

    def test_missing_scratch_dir_is_resource_error(self, tmp_path):
        with pytest.raises(SimapiResourceError):
            write_and_hold(0, 1, scratch_dir=str(tmp_path / "missing"))

    def test_cancel_deletes_file_early(self, tmp_path):
        cancel = threading.Event()
        threading.Timer(0.2, cancel.set).start()

        result = write_and_hold(30, 1, scratch_dir=str(tmp_path), cancel=cancel)

        assert result.cancelled is True
        assert result.elapsed_seconds < 5.0
        assert list(tmp_path.iterdir()) == []

    def test_default_scratch_dir_is_temp_dir(self):
        result = write_and_hold(0, 0)
        assert result.bytes_written == 0
        assert not os.path.exists(result.path)

"""
Disk pressure generator.

Writes `size_mb` MiB of random bytes to a uniquely named scratch file one
chunk at a time (only a single chunk is ever held in memory), keeps the file
on disk for the hold duration, then deletes it. The file is removed on every
exit path.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import time
from typing import Optional

from simapi.exceptions import SimapiInputError, SimapiResourceError
from simapi.stress.latency import hold, require_duration, require_non_negative
from simapi.stress.probability import random_bytes
from simapi.stress.result import StressResult

logger = logging.getLogger(__name__)

MIB = 1024 * 1024
DEFAULT_CHUNK_SIZE = 8192
FILE_PREFIX = "simapi_stress_"


def _remove(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to delete scratch file %s: %s", path, e)


def write_and_hold(
    duration_seconds: int,
    size_mb: int,
    *,
    scratch_dir: Optional[str] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel: Optional[threading.Event] = None,
) -> StressResult:
    """
    Write `size_mb` MiB to a scratch file, hold it, then delete it.

    Args:
        duration_seconds: How long the file stays on disk after writing.
        size_mb: Payload size in MiB, written as size_mb * MIB / chunk_size chunks.
        scratch_dir: Directory for the file (default: system temp dir).
        chunk_size: Bytes per write; must divide 1 MiB.
        cancel: Optional token that ends the hold early.

    Raises:
        SimapiInputError: On negative inputs or an invalid chunk size.
        SimapiResourceError: If the file cannot be created or written.
    """
    duration_seconds = require_duration("duration_seconds", duration_seconds)
    size_mb = require_non_negative("size_mb", size_mb)
    if chunk_size <= 0 or MIB % chunk_size:
        raise SimapiInputError(
            f"chunk_size must be a positive divisor of {MIB}, got {chunk_size}",
            parameter="chunk_size",
            value=chunk_size,
            code="input_out_of_range",
        )
    chunks = size_mb * (MIB // chunk_size)

    start = time.monotonic()
    try:
        fd, path = tempfile.mkstemp(prefix=FILE_PREFIX, dir=scratch_dir)
    except OSError as e:
        raise SimapiResourceError(
            f"Cannot create scratch file: {e}",
            resource="disk",
            acquired_mb=0,
            code="resource_exhausted",
        ) from e

    written = 0
    logger.info("Writing %d MiB to %s, holding for %ds", size_mb, path, duration_seconds)
    try:
        try:
            with os.fdopen(fd, "wb") as stream:
                for _ in range(chunks):
                    written += stream.write(random_bytes(chunk_size))
                stream.flush()
                os.fsync(stream.fileno())
        except OSError as e:
            raise SimapiResourceError(
                f"Disk write failed after {written} bytes: {e}",
                resource="disk",
                acquired_mb=written // MIB,
                code="resource_exhausted",
            ) from e

        cancelled = hold(duration_seconds, cancel)
    finally:
        _remove(path)

    elapsed = time.monotonic() - start
    logger.info("Deleted %s after %.2fs (cancelled=%s)", path, elapsed, cancelled)
    return StressResult(
        operation="disk",
        requested_seconds=duration_seconds,
        elapsed_seconds=elapsed,
        cancelled=cancelled,
        size_mb=size_mb,
        bytes_written=written,
        path=path,
    )

"""
Memory pressure generator.

Allocates `size_mb` anonymous 1 MiB mappings, writes a fill pattern into
each one so the pages are actually committed, holds them, then unmaps them.
Anonymous mmap regions go straight back to the OS when closed, so process
RSS returns to its baseline instead of lingering in the allocator.
"""

from __future__ import annotations

import logging
import mmap
import threading
import time
from typing import List, Optional

from simapi.exceptions import SimapiResourceError
from simapi.stress.latency import hold, require_duration, require_non_negative
from simapi.stress.result import StressResult

logger = logging.getLogger(__name__)

BLOCK_SIZE = 1024 * 1024
_FILL = b"\xa5" * BLOCK_SIZE


def allocate_block() -> mmap.mmap:
    """Map and fill one 1 MiB block."""
    block = mmap.mmap(-1, BLOCK_SIZE)
    block.write(_FILL)
    return block


def release_blocks(blocks: List[mmap.mmap]) -> None:
    """Unmap every block, emptying the list."""
    while blocks:
        block = blocks.pop()
        try:
            block.close()
        except (OSError, ValueError) as e:
            logger.warning("Failed to release memory block: %s", e)


def hold_memory(
    duration_seconds: int,
    size_mb: int,
    *,
    cancel: Optional[threading.Event] = None,
) -> StressResult:
    """
    Commit `size_mb` MiB, hold it for `duration_seconds`, then free it.

    Every block is released before this returns, whether the hold completed,
    was cancelled, or allocation failed partway.

    Raises:
        SimapiInputError: If duration_seconds or size_mb is negative.
        SimapiResourceError: If allocation failed (after cleanup).
    """
    duration_seconds = require_duration("duration_seconds", duration_seconds)
    size_mb = require_non_negative("size_mb", size_mb)

    start = time.monotonic()
    blocks: List[mmap.mmap] = []
    logger.info("Allocating %d MiB for %ds", size_mb, duration_seconds)
    try:
        try:
            for _ in range(size_mb):
                blocks.append(allocate_block())
        except (MemoryError, OSError) as e:
            acquired = len(blocks)
            raise SimapiResourceError(
                f"Memory allocation failed after {acquired} of {size_mb} MiB: {e}",
                resource="memory",
                acquired_mb=acquired,
                code="resource_exhausted",
            ) from e

        cancelled = hold(duration_seconds, cancel)
    finally:
        release_blocks(blocks)

    elapsed = time.monotonic() - start
    logger.info("Released %d MiB after %.2fs (cancelled=%s)", size_mb, elapsed, cancelled)
    return StressResult(
        operation="memory",
        requested_seconds=duration_seconds,
        elapsed_seconds=elapsed,
        cancelled=cancelled,
        size_mb=size_mb,
    )

"""
Probability gate: a single-shot weighted coin flip.

One process-wide random source is seeded from OS entropy at import time and
shared by every caller. It is never re-created per call, so rapid or
concurrent invocations do not correlate.
"""

from __future__ import annotations

import random
import threading
from typing import Optional

_rng = random.Random()
_rng_lock = threading.Lock()


def clamp_percent(value: int) -> int:
    """Clamp a percentage to [0, 100]."""
    return max(0, min(100, int(value)))


def fires(probability_percent: int, rng: Optional[random.Random] = None) -> bool:
    """
    Decide whether an event fires on this invocation.

    Draws a uniform integer in [0, 100) and fires when it is below the
    clamped probability. 0 never fires, 100 always fires.

    Args:
        probability_percent: Firing probability, clamped to [0, 100].
        rng: Optional seeded source for reproducible tests.
    """
    threshold = clamp_percent(probability_percent)
    if rng is not None:
        return rng.randrange(100) < threshold
    with _rng_lock:
        drawn = _rng.randrange(100)
    return drawn < threshold


def uniform_int(low: int, high: int) -> int:
    """Uniform integer in [low, high) from the shared source."""
    with _rng_lock:
        return _rng.randrange(low, high)


def random_bytes(n: int) -> bytes:
    """n random bytes from the shared source (not for cryptographic use)."""
    with _rng_lock:
        return _rng.randbytes(n)

"""Millisecond clocks used by the cache and rate limiter."""

import time
from collections.abc import Callable

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic time in milliseconds."""
    return time.monotonic() * 1000.0

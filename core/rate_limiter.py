# /core/rate_limiter.py

import threading
import time
from typing import Callable


class FixedIntervalRateLimiter:
    """
    Spaces calls at least `interval_seconds` apart, across all threads sharing
    the instance. The clock and sleep functions are injectable for tests.
    """

    def __init__(self, interval_seconds: float,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be non-negative")
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_allowed = None

    def wait(self) -> float:
        """Blocks until the next call is permitted; returns the time slept."""
        with self._lock:
            now = self._clock()
            delay = 0.0
            if self._next_allowed is not None and self._next_allowed > now:
                delay = self._next_allowed - now
                self._sleep(delay)
            self._next_allowed = now + delay + self.interval_seconds
            return delay

    def __enter__(self):
        self.wait()
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

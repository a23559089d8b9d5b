"""Entity id generation."""

import threading
import time
from typing import Callable


class IdGenerator:
    """
    Timestamp-based ids that stay unique under rapid successive calls.

    The millisecond clock is combined with a monotonic guard: when the clock
    has not advanced past the last issued value, the last value plus one is
    used instead.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self, prefix: str) -> str:
        with self._lock:
            stamp = max(int(self._clock() * 1000), self._last + 1)
            self._last = stamp
        return f"{prefix}{stamp}"

"""Order numbers derived from a monotonically increasing millisecond clock."""

import threading
import time


class OrderNumberSequence:
    """Issues ``ORD-<epoch ms>`` numbers that never repeat within a process.

    When two numbers are requested within the same millisecond the second one
    is bumped forward. Separate processes can still collide; that risk is
    accepted and the unique constraint on ``order_number`` rejects the loser.
    """

    prefix = "ORD"

    def __init__(self, clock=None):
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            self._last = max(self._clock(), self._last + 1)
            return f"{self.prefix}-{self._last}"


order_numbers = OrderNumberSequence()

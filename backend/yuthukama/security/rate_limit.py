"""
Login throttling with exponential backoff.
Tracks failed attempts per key (normalized email).
"""
import time
from collections import defaultdict
from threading import Lock


class LoginThrottle:
    """
    In-memory failed-attempt counter.

    After max_failures failures the key must wait base_delay seconds,
    doubling with each further failure up to max_delay. A success clears it.
    """

    def __init__(self, max_failures: int = 5, base_delay: float = 2.0, max_delay: float = 300.0):
        self._failures = defaultdict(lambda: {"count": 0, "last_time": 0.0})
        self._lock = Lock()

        self.max_failures = max_failures
        self.base_delay = base_delay
        self.max_delay = max_delay

    def _required_delay(self, count: int) -> float:
        if count < self.max_failures:
            return 0.0
        return min(self.base_delay * (2 ** (count - self.max_failures)), self.max_delay)

    def retry_after(self, key: str) -> float:
        """Seconds until the next attempt is allowed; 0 when allowed now."""
        with self._lock:
            entry = self._failures.get(key)
            if entry is None:
                return 0.0
            waited = time.time() - entry["last_time"]
            return max(0.0, self._required_delay(entry["count"]) - waited)

    def record(self, key: str, success: bool) -> None:
        with self._lock:
            if success:
                self._failures.pop(key, None)
                return
            entry = self._failures[key]
            entry["count"] += 1
            entry["last_time"] = time.time()

    def reset(self) -> None:
        with self._lock:
            self._failures.clear()


login_throttle = LoginThrottle()

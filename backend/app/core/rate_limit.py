import math
import time
from collections import deque
from threading import Lock
from typing import Callable


class SlidingWindowLimiter:
    """Per-key request counter over a trailing window of ``window_seconds``."""

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = Lock()

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def retry_after(self, key: str) -> int:
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0
            return max(1, math.ceil(self.window_seconds - (self._clock() - hits[0])))


def is_upload(method: str, path: str) -> bool:
    return method == "POST" and path.rstrip("/") in ("/works", "/chapters")

"""Sliding-window rate limiter, one window per key (usually a user id)."""
import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Hashable, NamedTuple, Optional


class RateLimitDecision(NamedTuple):
    allowed: bool
    retry_after: int
    remaining: int


class RateLimiter:
    """
    Allow at most `max_requests` calls per `window_seconds` for each key.

    Each key owns an ordered deque of request timestamps. A key's deque is
    pruned whenever that key calls, and removed once empty. Keys that never
    call again are dropped by a sweep that runs at most once per window, so
    only keys seen within the last window are held.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: Dict[Hashable, Deque[float]] = {}
        self._last_sweep = float("-inf")
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)

    def _prune(self, stamps: Deque[float], now: float) -> None:
        while stamps and now - stamps[0] >= self.window_seconds:
            stamps.popleft()

    def _sweep(self, now: float) -> None:
        # caller holds the lock
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        stale = [key for key, stamps in self._requests.items()
                 if not stamps or now - stamps[-1] >= self.window_seconds]
        for key in stale:
            del self._requests[key]

    def allow(self, key: Hashable) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            stamps = self._requests.get(key)
            if stamps is not None:
                self._prune(stamps, now)

            if stamps and len(stamps) >= self.max_requests:
                wait = stamps[0] + self.window_seconds - now
                return RateLimitDecision(False, max(1, math.ceil(wait)), 0)

            if stamps is None:
                stamps = self._requests[key] = deque()
            stamps.append(now)
            return RateLimitDecision(True, 0, self.max_requests - len(stamps))

    def reset(self, key: Optional[Hashable] = None) -> None:
        with self._lock:
            if key is None:
                self._requests.clear()
            else:
                self._requests.pop(key, None)

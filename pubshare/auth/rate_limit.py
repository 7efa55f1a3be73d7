from __future__ import annotations

import math
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: int = 0


class SlidingWindowRateLimiter:
    """Counts failed attempts per key inside a sliding time window."""

    def __init__(
        self,
        *,
        max_attempts: int,
        window_seconds: int,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_attempts = max(1, int(max_attempts))
        self._window_seconds = max(1, int(window_seconds))
        self._now = now
        self._failures: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, key: str, current: float) -> deque[float] | None:
        # Keys with no failures left in the window are dropped.
        attempts = self._failures.get(key)
        if attempts is None:
            return None
        while attempts and current - attempts[0] >= self._window_seconds:
            attempts.popleft()
        if not attempts:
            del self._failures[key]
            return None
        return attempts

    def check(self, key: str) -> RateLimitDecision:
        with self._lock:
            current = self._now()
            attempts = self._prune(key, current)
            if attempts is None or len(attempts) < self._max_attempts:
                return RateLimitDecision(allowed=True)
            retry_after = self._window_seconds - (current - attempts[0])
            return RateLimitDecision(allowed=False, retry_after_seconds=max(1, math.ceil(retry_after)))

    def record_failure(self, key: str) -> None:
        with self._lock:
            current = self._now()
            for stale_key in [name for name in self._failures if name != key]:
                self._prune(stale_key, current)
            attempts = self._prune(key, current)
            if attempts is None:
                attempts = self._failures[key] = deque()
            attempts.append(current)

    @property
    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._failures)

    def reset(self, key: str) -> None:
        with self._lock:
            self._failures.pop(key, None)

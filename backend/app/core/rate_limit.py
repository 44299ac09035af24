"""In-memory daily request counter keyed by caller identity."""

import logging
import threading
import time
from typing import Callable

from app.core.errors import RateLimitedError

logger = logging.getLogger(__name__)


class DailyRateLimiter:
    """Allow at most ``max_requests`` per caller within a fixed window.

    The window for a caller starts with their first request and resets once
    ``window_hours`` have elapsed. Counters live in process memory only, so
    a restart (or a second worker) starts from zero.
    """

    def __init__(
        self,
        max_requests: int = 3,
        window_hours: int = 24,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_hours * 60 * 60
        self._clock = clock
        self._counters: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> int:
        """Record a request for ``key`` and return the remaining allowance.

        Raises:
            RateLimitedError: If the caller has used up the current window
        """
        now = self._clock()
        with self._lock:
            self._prune(now)
            window_start, count = self._counters.get(key, (now, 0))

            if count >= self.max_requests:
                retry_after = int(window_start + self.window_seconds - now)
                logger.info(f"Rate limit reached for {key}, resets in {retry_after}s")
                raise RateLimitedError(
                    "Too many requests. Please wait a moment before trying again."
                )

            self._counters[key] = (window_start, count + 1)
            return self.max_requests - count - 1

    def reset(self, key: str) -> None:
        """Forget the counter for ``key``."""
        with self._lock:
            self._counters.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._counters)

    def _prune(self, now: float) -> None:
        # Callers whose window has elapsed start over on their next request
        expired = [
            key
            for key, (window_start, _) in self._counters.items()
            if now - window_start >= self.window_seconds
        ]
        for key in expired:
            del self._counters[key]

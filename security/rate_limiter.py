"""
security/rate_limiter.py
-------------------------
Sliding-window rate limiting for public write paths.
Limits how many events a caller (keyed by address) may produce within a
time window.
"""

import threading
import time
from collections import defaultdict
from typing import Callable, Optional

from config import CONTACT_RATE_LIMIT, CONTACT_RATE_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Tracks event timestamps per key and refuses events past the limit.

    Configuration (via .env, for the contact form):
        CONTACT_RATE_LIMIT: Max submissions per window (default: 5).
        CONTACT_RATE_WINDOW_SECONDS: Window duration in seconds (default: 3600).
    """

    def __init__(
        self,
        max_events: int = CONTACT_RATE_LIMIT,
        window_seconds: float = CONTACT_RATE_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_events = max_events
        self.window_seconds = window_seconds
        self._clock = clock
        self._events: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _cleanup(self, key: str, now: float) -> None:
        """Remove expired timestamps for a key, and the key once it has none."""
        cutoff = now - self.window_seconds
        recent = [t for t in self._events.get(key, ()) if t > cutoff]
        if recent:
            self._events[key] = recent
        else:
            self._events.pop(key, None)

    def _sweep(self, now: float) -> None:
        """Drop every key whose events have all left the window (at most once per window)."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self._events):
            self._cleanup(key, now)

    def allow(self, key: str) -> bool:
        """
        Record an event for ``key`` if it is within the limit.

        Returns:
            True if the event is allowed, False if the key is over its limit.
        """
        now = self._clock()
        with self._lock:
            self._sweep(now)
            self._cleanup(key, now)
            if len(self._events[key]) >= self.max_events:
                logger.warning(f"⚠️ Rate limit hit for {key}")
                return False
            self._events[key].append(now)
            return True

    def reset(self, key: Optional[str] = None) -> None:
        """Forget the history of one key, or of every key."""
        with self._lock:
            if key is None:
                self._events.clear()
            else:
                self._events.pop(key, None)

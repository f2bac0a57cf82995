"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock covers lookups, updates and eviction.
- Expiry is lazy: stale windows are reset on the next request from the same
  key, and a sweep at most once per window drops keys that went quiet.
"""

from __future__ import annotations

import threading
import time
from dataclasses import replace
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, Decision, WindowState


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key in a fixed window.

    A window opens with the first request from a key and lasts
    ``window_seconds``. Requests inside it increment the count, denied ones
    included; the first request arriving after it opens a new window with a
    count of 1.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            max_requests: Requests allowed per window. 0 denies everything
                after the request that opens a window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source returning seconds. Should be monotonic.

        Raises:
            ValueError: If max_requests or window_seconds are invalid.
        """
        if max_requests < 0:
            raise ValueError("max_requests must be >= 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, WindowState] = {}
        self._last_sweep: float | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _is_expired(self, state: WindowState, now: float) -> bool:
        return now - state.window_start > self._window_seconds

    def _maybe_sweep(self, now: float) -> None:
        """Evict stale keys, at most once per window. Caller holds the lock."""
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep > self._window_seconds:
            self._evict_expired(now)
            self._last_sweep = now

    def _evict_expired(self, now: float) -> int:
        expired = [
            key
            for key, state in self._state_by_key.items()
            if self._is_expired(state, now)
        ]
        for key in expired:
            del self._state_by_key[key]
        return len(expired)

    def allow(self, key: str, now: float | None = None) -> Decision:
        """Record a request for ``key`` and return the decision.

        Never raises: any string, the empty one included, is a bucket.

        Args:
            key: Client identity (e.g., IP address).
            now: Arrival time in clock seconds; defaults to the limiter clock.

        Returns:
            Decision.DENY once the count in the current window exceeds
            max_requests, Decision.ALLOW otherwise.
        """
        if now is None:
            now = self._clock()

        with self._lock:
            self._maybe_sweep(now)

            state = self._state_by_key.get(key)
            if state is None:
                self._state_by_key[key] = WindowState(count=1, window_start=now)
                return Decision.ALLOW

            if self._is_expired(state, now):
                state.count = 1
                state.window_start = now
                return Decision.ALLOW

            state.count += 1
            if state.count > self._max_requests:
                return Decision.DENY
            return Decision.ALLOW

    def get_state(self, key: str) -> WindowState | None:
        """Return a snapshot of the window for ``key`` (None when untracked)."""
        with self._lock:
            state = self._state_by_key.get(key)
            return replace(state) if state is not None else None

    def purge_expired(self, now: float | None = None) -> int:
        """Drop every key whose window has elapsed.

        Args:
            now: Reference time; defaults to the limiter clock.

        Returns:
            Number of keys removed.
        """
        if now is None:
            now = self._clock()
        with self._lock:
            removed = self._evict_expired(now)
            self._last_sweep = now
            return removed

    def retry_after(self, key: str, now: float | None = None) -> float:
        """Seconds left before a new window can open for ``key``."""
        if now is None:
            now = self._clock()
        with self._lock:
            state = self._state_by_key.get(key)
            if state is None:
                return 0.0
            return max(0.0, state.window_start + self._window_seconds - now)

"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the storage behind the decision can change without touching the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class Decision(str, Enum):
    """Outcome of a rate limit check."""

    ALLOW = "allow"
    DENY = "deny"


@dataclass
class WindowState:
    """Request count for one key inside its current fixed window.

    Attributes:
        count: Requests observed since ``window_start`` (denied ones included).
        window_start: Clock reading of the request that opened the window.
    """

    count: int
    window_start: float


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of keys currently tracked."""

    @property
    @abstractmethod
    def max_requests(self) -> int:
        """Maximum number of allowed requests per window."""

    @property
    @abstractmethod
    def window_seconds(self) -> float:
        """Length of one window in seconds."""

    @abstractmethod
    def allow(self, key: str, now: float | None = None) -> Decision:
        """Record a request for ``key`` and decide whether it may proceed.

        Args:
            key: Client identity (e.g., IP address).
            now: Arrival time; defaults to the limiter clock.

        Returns:
            Decision.ALLOW or Decision.DENY.
        """
        raise NotImplementedError

    @abstractmethod
    def retry_after(self, key: str, now: float | None = None) -> float:
        """Seconds until the window tracked for ``key`` elapses (0 when untracked)."""
        raise NotImplementedError

    @abstractmethod
    def get_state(self, key: str) -> WindowState | None:
        """Return a copy of the window state tracked for ``key``, if any."""
        raise NotImplementedError

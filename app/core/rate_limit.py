"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

- The limiter instance is built by the app factory and stored on
  ``app.state.rate_limiter``; routes reach it through ``request.app``.
- Clients are identified by remote IP address.
- Throttled requests raise RateLimitAppError, rendered as HTTP 429 by the
  exception handlers.
"""

from __future__ import annotations

import hashlib
import logging
import math
from typing import Callable

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, Decision
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import AppSettings
from app.core.errors import ErrorDetails, RateLimitAppError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many request!. Try again some time later"


def build_rate_limiter(app_settings: AppSettings) -> AbstractRateLimiter:
    """Create the limiter configured by ``APP_RATE_LIMIT_*`` settings."""
    return InMemoryFixedWindowRateLimiter(
        max_requests=app_settings.rate_limit_max_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )


ClientKeyExtractor = Callable[[Request], str]


def get_client_key(request: Request) -> str:
    """Default identity extractor: the remote IP address of the connection."""
    return request.client.host if request.client else "unknown"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing client IPs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def _throttle_details(limiter: AbstractRateLimiter, key: str) -> ErrorDetails:
    return {
        "limit": limiter.max_requests,
        "remaining": 0,
        "retry_after": math.ceil(limiter.retry_after(key)),
    }


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client request budget.

    Args:
        request: FastAPI request.

    Raises:
        RateLimitAppError: When the client exceeded its budget for the
            current window.
    """
    app_settings: AppSettings = request.app.state.settings.app
    if not app_settings.rate_limit_enabled:
        return

    limiter: AbstractRateLimiter = request.app.state.rate_limiter
    extract_key: ClientKeyExtractor = request.app.state.client_key_extractor
    key = extract_key(request)
    key_hash = _hash_limiter_key(key)

    decision = limiter.allow(key)
    if decision is Decision.ALLOW:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": limiter.max_requests,
                "window_s": limiter.window_seconds,
            },
        )
        return

    state = limiter.get_state(key)
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": limiter.max_requests,
            "count": state.count if state else None,
            "window_s": limiter.window_seconds,
        },
    )

    details = _throttle_details(limiter, key) if app_settings.rate_limit_include_headers else None
    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message=RATE_LIMIT_MESSAGE,
        details=details,
    )

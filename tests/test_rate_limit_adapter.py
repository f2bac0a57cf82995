"""Unit tests for in-memory rate limiter adapter."""

import threading
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.base import Decision
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter


def test_first_request_is_allowed() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=10, window_seconds=60)

    assert limiter.allow("never-seen", now=0.0) is Decision.ALLOW
    state = limiter.get_state("never-seen")
    assert state is not None
    assert state.count == 1
    assert state.window_start == 0.0


def test_allows_up_to_limit_in_same_window() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=3, window_seconds=60)

    decisions = [limiter.allow("k", now=1000.0 + i) for i in range(3)]

    assert decisions == [Decision.ALLOW] * 3


def test_blocks_when_over_limit() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=2, window_seconds=60)

    assert limiter.allow("k", now=1000.0) is Decision.ALLOW
    assert limiter.allow("k", now=1000.0) is Decision.ALLOW
    assert limiter.allow("k", now=1000.0) is Decision.DENY


def test_burst_of_twelve_then_reset_after_window() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=10, window_seconds=900)

    decisions = [limiter.allow("1.2.3.4", now=0.0) for _ in range(12)]

    assert decisions[:10] == [Decision.ALLOW] * 10
    assert decisions[10:] == [Decision.DENY] * 2

    assert limiter.allow("1.2.3.4", now=900.001) is Decision.ALLOW
    state = limiter.get_state("1.2.3.4")
    assert state.count == 1
    assert state.window_start == 900.001


def test_denied_requests_keep_counting() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=2, window_seconds=10)

    for _ in range(50):
        limiter.allow("k", now=5.0)

    assert limiter.get_state("k").count == 50
    assert limiter.allow("k", now=15.5) is Decision.ALLOW
    assert limiter.get_state("k").count == 1


def test_request_exactly_at_window_end_stays_in_window() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=1, window_seconds=10)

    assert limiter.allow("k", now=0.0) is Decision.ALLOW
    assert limiter.allow("k", now=10.0) is Decision.DENY
    assert limiter.allow("k", now=10.01) is Decision.ALLOW


def test_window_starts_at_first_request_not_at_clock_boundary() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=1, window_seconds=10)

    assert limiter.allow("k", now=7.0) is Decision.ALLOW
    # 10.5 would be a new aligned window; here it is still inside [7, 17]
    assert limiter.allow("k", now=10.5) is Decision.DENY


def test_isolated_by_key() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=1, window_seconds=60)

    assert limiter.allow("k1", now=1000.0) is Decision.ALLOW
    assert limiter.allow("k1", now=1000.0) is Decision.DENY

    assert limiter.allow("k2", now=1000.0) is Decision.ALLOW


def test_zero_max_requests_only_allows_window_opener() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=0, window_seconds=60)

    assert limiter.allow("k", now=0.0) is Decision.ALLOW
    assert limiter.allow("k", now=1.0) is Decision.DENY
    assert limiter.allow("k", now=61.0) is Decision.ALLOW


def test_empty_key_is_a_regular_bucket() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=1, window_seconds=60)

    assert limiter.allow("", now=0.0) is Decision.ALLOW
    assert limiter.allow("", now=0.0) is Decision.DENY


def test_uses_injected_clock_when_now_omitted() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(max_requests=1, window_seconds=10, clock=clock)

    assert limiter.allow("k") is Decision.ALLOW
    assert limiter.allow("k") is Decision.DENY
    assert limiter.retry_after("k") == pytest.approx(10.0)

    clock.return_value = 1004.0
    assert limiter.retry_after("k") == pytest.approx(6.0)

    clock.return_value = 1010.5
    assert limiter.allow("k") is Decision.ALLOW


def test_retry_after_is_zero_for_unknown_key() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=1, window_seconds=10)

    assert limiter.retry_after("nobody", now=0.0) == 0.0


def test_purge_expired_drops_only_stale_keys() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=5, window_seconds=10)
    limiter.allow("old", now=0.0)
    limiter.allow("fresh", now=8.0)

    assert limiter.purge_expired(now=12.0) == 1
    assert limiter.get_state("old") is None
    assert limiter.get_state("fresh") is not None
    assert len(limiter) == 1


def test_quiet_keys_are_swept_on_later_traffic() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=5, window_seconds=10)
    for i in range(20):
        limiter.allow(f"10.0.0.{i}", now=0.0)
    assert len(limiter) == 20

    limiter.allow("10.0.1.1", now=25.0)

    assert len(limiter) == 1
    assert limiter.get_state("10.0.1.1").count == 1


def test_steady_traffic_is_not_reset_mid_window() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=3, window_seconds=10)

    assert limiter.allow("k", now=0.0) is Decision.ALLOW
    # first window elapsed; a new one opens at 10.5
    assert limiter.allow("k", now=10.5) is Decision.ALLOW
    assert limiter.allow("k", now=12.0) is Decision.ALLOW
    assert limiter.allow("k", now=20.0) is Decision.ALLOW
    assert limiter.allow("k", now=20.4) is Decision.DENY


def test_get_state_returns_a_copy() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=5, window_seconds=10)
    limiter.allow("k", now=0.0)

    snapshot = limiter.get_state("k")
    snapshot.count = 99

    assert limiter.get_state("k").count == 1


def test_concurrent_requests_are_not_lost() -> None:
    limiter = InMemoryFixedWindowRateLimiter(max_requests=100, window_seconds=60)
    results: list[Decision] = []
    results_lock = threading.Lock()

    def worker() -> None:
        for _ in range(50):
            decision = limiter.allow("shared", now=0.0)
            with results_lock:
                results.append(decision)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert limiter.get_state("shared").count == 400
    assert results.count(Decision.ALLOW) == 100
    assert results.count(Decision.DENY) == 300


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_requests": -1, "window_seconds": 60},
        {"max_requests": 1, "window_seconds": 0},
        {"max_requests": 1, "window_seconds": -5},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowRateLimiter(**kwargs)

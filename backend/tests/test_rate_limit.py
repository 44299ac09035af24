"""Tests for the per-caller daily request counter."""

import pytest

from app.core.errors import RateLimitedError
from app.core.rate_limit import DailyRateLimiter


def test_allows_up_to_max_requests(clock) -> None:
    limiter = DailyRateLimiter(max_requests=3, window_hours=24, clock=clock)

    assert [limiter.hit("1.2.3.4") for _ in range(3)] == [2, 1, 0]
    with pytest.raises(RateLimitedError):
        limiter.hit("1.2.3.4")


def test_callers_are_counted_separately(clock) -> None:
    limiter = DailyRateLimiter(max_requests=1, clock=clock)

    limiter.hit("alice")
    limiter.hit("bob")
    with pytest.raises(RateLimitedError):
        limiter.hit("alice")


def test_window_resets(clock) -> None:
    limiter = DailyRateLimiter(max_requests=1, window_hours=24, clock=clock)
    limiter.hit("alice")

    clock.advance(23 * 60 * 60)
    with pytest.raises(RateLimitedError):
        limiter.hit("alice")

    clock.advance(60 * 60)
    assert limiter.hit("alice") == 0


def test_reset_forgets_caller(clock) -> None:
    limiter = DailyRateLimiter(max_requests=1, clock=clock)
    limiter.hit("alice")

    limiter.reset("alice")

    assert limiter.hit("alice") == 0


def test_expired_windows_are_dropped(clock) -> None:
    limiter = DailyRateLimiter(max_requests=1, window_hours=24, clock=clock)
    for i in range(5):
        limiter.hit(f"10.0.0.{i}")
    assert len(limiter) == 5

    clock.advance(24 * 60 * 60)
    limiter.hit("alice")

    assert len(limiter) == 1

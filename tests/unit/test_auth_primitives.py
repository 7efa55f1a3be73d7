from pubshare.auth.rate_limit import SlidingWindowRateLimiter


def test_rate_limiter_enforces_windowed_attempt_budget() -> None:
    clock = {"now": 0.0}
    limiter = SlidingWindowRateLimiter(
        max_attempts=2,
        window_seconds=10,
        now=lambda: clock["now"],
    )
    key = "127.0.0.1:test@example.com"

    assert limiter.check(key).allowed
    limiter.record_failure(key)
    assert limiter.check(key).allowed
    limiter.record_failure(key)

    decision = limiter.check(key)
    assert not decision.allowed
    assert decision.retry_after_seconds == 10

    clock["now"] = 11.0
    assert limiter.check(key).allowed


def test_rate_limiter_reset_clears_failures() -> None:
    limiter = SlidingWindowRateLimiter(max_attempts=1, window_seconds=60, now=lambda: 5.0)
    limiter.record_failure("key")
    assert not limiter.check("key").allowed

    limiter.reset("key")

    assert limiter.check("key").allowed


def test_rate_limiter_forgets_keys_without_failures_in_window() -> None:
    clock = {"now": 0.0}
    limiter = SlidingWindowRateLimiter(max_attempts=3, window_seconds=10, now=lambda: clock["now"])

    for index in range(1_000):
        assert limiter.check(f"10.0.0.1:user{index}@example.com").allowed
    assert limiter.tracked_keys == 0

    limiter.record_failure("10.0.0.1:a@example.com")
    limiter.record_failure("10.0.0.1:b@example.com")
    assert limiter.tracked_keys == 2

    clock["now"] = 20.0
    assert limiter.check("10.0.0.1:a@example.com").allowed
    assert limiter.tracked_keys == 1
    limiter.record_failure("10.0.0.1:c@example.com")
    assert limiter.tracked_keys == 1

from __future__ import annotations

from functools import lru_cache

from pubshare.auth.rate_limit import SlidingWindowRateLimiter
from pubshare.settings import settings


@lru_cache
def get_login_rate_limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(
        max_attempts=settings.login_rate_limit_attempts,
        window_seconds=settings.login_rate_limit_window_seconds,
    )

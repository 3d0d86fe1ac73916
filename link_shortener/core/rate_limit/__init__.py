"""In-process sliding-window rate limiting."""

from link_shortener.core.rate_limit.identity import client_identity
from link_shortener.core.rate_limit.limiter import (
    UNKNOWN_IDENTITY,
    Decision,
    SlidingWindowRateLimiter,
)
from link_shortener.core.rate_limit.middleware import (
    RateLimitMiddleware,
    get_rate_limiter,
    setup_rate_limiting,
    sweep_rate_limiter,
)

__all__ = [
    "UNKNOWN_IDENTITY",
    "Decision",
    "SlidingWindowRateLimiter",
    "RateLimitMiddleware",
    "client_identity",
    "get_rate_limiter",
    "setup_rate_limiting",
    "sweep_rate_limiter",
]

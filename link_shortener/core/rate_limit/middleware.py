"""FastAPI rate limiting middleware setup."""

import math
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from link_shortener.core.config import settings
from link_shortener.core.rate_limit.identity import client_identity
from link_shortener.core.rate_limit.limiter import Decision, SlidingWindowRateLimiter
from link_shortener.core.telemetry import get_meter

meter = get_meter("link_shortener.rate_limit")

rejected_counter = meter.create_counter(
    name="link_shortener.rate_limit.rejected",
    description="Number of requests rejected by the rate limiter",
    unit="1",
)

# Process-wide limiter, created by setup_rate_limiting
rate_limiter: Optional[SlidingWindowRateLimiter] = None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests from clients that exhausted their window budget."""

    def __init__(self, app: ASGIApp, limiter: SlidingWindowRateLimiter) -> None:
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        identity = client_identity(request.scope)

        if self.limiter.admit(identity) is Decision.REJECT:
            retry_after = math.ceil(self.limiter.retry_after(identity))
            rejected_counter.add(1, {"http.path": request.url.path})
            logger.warning(
                "Rate limit exceeded",
                ip=identity,
                path=request.url.path,
                method=request.method,
                retry_after=retry_after
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Rate limit exceeded",
                    "detail": f"Rate limit exceeded. Please try again in {retry_after} seconds.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        return await call_next(request)


def setup_rate_limiting(
    app: FastAPI,
    limiter: Optional[SlidingWindowRateLimiter] = None
) -> SlidingWindowRateLimiter:
    """Create the process-wide limiter and add the middleware to the app.

    Args:
        app: FastAPI application instance
        limiter: Optional pre-built limiter, defaults to one built from settings

    Returns:
        The limiter guarding the application
    """
    global rate_limiter

    if limiter is None:
        limiter = SlidingWindowRateLimiter(
            limit=settings.RATE_LIMIT_REQUESTS,
            window=settings.RATE_LIMIT_WINDOW_SECONDS
        )
    rate_limiter = limiter

    app.add_middleware(RateLimitMiddleware, limiter=limiter)

    logger.info(
        "Rate limiting middleware added",
        limit=limiter.limit,
        window_seconds=limiter.window
    )
    return limiter


def get_rate_limiter() -> Optional[SlidingWindowRateLimiter]:
    """Return the process-wide limiter, if rate limiting was set up."""
    return rate_limiter


def sweep_rate_limiter() -> int:
    """Drop idle client identities from the process-wide limiter."""
    if rate_limiter is None:
        return 0
    removed = rate_limiter.sweep()
    logger.info(
        "Rate limiter sweep completed",
        removed=removed,
        tracked=rate_limiter.tracked_identities
    )
    return removed

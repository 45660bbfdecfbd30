"""Rate limiting middleware and dependencies using in-process sliding windows."""

import logging
import time
from typing import Callable, Dict, List

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.dependencies.common import get_origin_address

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class SlidingWindowRateLimiter:
    """
    Per-key sliding-window request counter held in process memory.

    Each key keeps the timestamps of its accepted requests inside the
    window. Counters are not shared between processes and do not survive a
    restart.
    """

    def __init__(
        self,
        limit: int,
        window: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window = window
        self._clock = clock
        self.requests: Dict[str, List[float]] = {}
        self.cleanup_interval = min(window, 60)
        self.last_cleanup = clock()

    async def check_rate_limit(self, key: str) -> bool:
        """Record a request for ``key``; False when it exceeds the limit."""
        current_time = self._clock()
        window_start = current_time - self.window

        # Cleanup old entries periodically
        if current_time - self.last_cleanup > self.cleanup_interval:
            await self._cleanup_old_entries(window_start)
            self.last_cleanup = current_time

        # Remove requests outside the window
        timestamps = [
            timestamp for timestamp in self.requests.get(key, [])
            if timestamp > window_start
        ]

        if len(timestamps) >= self.limit:
            self.requests[key] = timestamps
            return False

        timestamps.append(current_time)
        self.requests[key] = timestamps
        return True

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest request for ``key`` leaves the window."""
        timestamps = self.requests.get(key)
        if not timestamps:
            return 0
        return max(1, int(timestamps[0] + self.window - self._clock()) + 1)

    async def _cleanup_old_entries(self, cutoff_time: float):
        """Remove old entries to prevent memory leaks."""
        keys_to_remove = []
        for key, timestamps in self.requests.items():
            self.requests[key] = [
                timestamp for timestamp in timestamps
                if timestamp > cutoff_time
            ]
            if not self.requests[key]:
                keys_to_remove.append(key)

        for key in keys_to_remove:
            del self.requests[key]


def rate_limit_detail() -> dict:
    """Uniform rejection body, identical for every limiter tier."""
    return {
        "error": "rate_limit_exceeded",
        "message": RATE_LIMIT_MESSAGE,
        "code": "RATE_LIMIT_EXCEEDED",
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Global request limit per origin address, applied to every route.

    Reads its limiter from ``app.state.global_rate_limiter`` so each
    application instance owns its counters.
    """

    async def dispatch(self, request: Request, call_next):
        """Apply rate limiting to requests."""
        limiter: SlidingWindowRateLimiter = request.app.state.global_rate_limiter
        origin = get_origin_address(request)

        if not await limiter.check_rate_limit(origin):
            logger.warning(f"Rate limit exceeded for {origin} on {request.url.path}")
            detail = rate_limit_detail()
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "errors": [{
                        "status": "429",
                        "code": detail["code"],
                        "title": detail["message"],
                        "detail": detail["message"],
                        "source": {"pointer": request.url.path},
                    }]
                },
                headers={"Retry-After": str(limiter.retry_after(origin))},
            )

        return await call_next(request)


async def enforce_auth_rate_limit(request: Request) -> None:
    """Dependency for register and login: one shared stricter counter per origin."""
    limiter: SlidingWindowRateLimiter = request.app.state.auth_rate_limiter
    origin = get_origin_address(request)

    if not await limiter.check_rate_limit(origin):
        logger.warning(f"Authentication rate limit exceeded for {origin}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=rate_limit_detail(),
            headers={"Retry-After": str(limiter.retry_after(origin))},
        )

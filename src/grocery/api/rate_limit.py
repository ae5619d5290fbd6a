"""Fixed-window request limiter for the ``/api`` prefix.

Counts requests per client address in the current window and rejects the
excess with 429. State is per process.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from grocery.api.errors import ErrorKind, error_response
from grocery.settings import RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW_SECONDS

RATE_LIMIT_MESSAGE = "Too many requests, please try again later"


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after_seconds: int


class FixedWindowLimiter:
    def __init__(self, limit: int = RATE_LIMIT_REQUESTS, window_seconds: int = RATE_LIMIT_WINDOW_SECONDS, clock=None):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock: Callable[[], float] = clock or time.monotonic
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_sweep = self._clock()
        self._lock = Lock()

    def hit(self, key: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)

        retry_after = max(0, int(started + self.window_seconds - now))
        if count > self.limit:
            return RateLimitResult(allowed=False, remaining=0, retry_after_seconds=retry_after)
        return RateLimitResult(allowed=True, remaining=self.limit - count, retry_after_seconds=retry_after)

    def _sweep(self, now: float) -> None:
        """Forget clients whose window has closed. Caller holds the lock."""
        self._windows = {
            key: window for key, window in self._windows.items() if now - window[0] < self.window_seconds
        }
        self._last_sweep = now

    @property
    def tracked_clients(self) -> int:
        return len(self._windows)


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: FixedWindowLimiter | None = None, prefix: str = "/api"):
        super().__init__(app)
        self.limiter = limiter or FixedWindowLimiter()
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        result = self.limiter.hit(client)
        if not result.allowed:
            response = error_response(429, ErrorKind.RATE_LIMITED, RATE_LIMIT_MESSAGE)
            response.headers["Retry-After"] = str(result.retry_after_seconds)
            return response

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        return response

"""
Middleware configuration for the application.
Includes Correlation ID setup, request logging and the per-IP request quota.
"""

import math
import time
import structlog
from typing import Callable, Dict, Optional, Tuple
from fastapi import Request, Response
from asgi_correlation_id import CorrelationIdMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings
from app.core.exceptions import RateLimitExceededException, error_response

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log requests and responses with timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)

            process_time = time.time() - start_time

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time_ms=round(process_time * 1000, 2),
            )

            return response

        except Exception:
            process_time = time.time() - start_time
            logger.exception(
                "Request failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round(process_time * 1000, 2),
            )
            raise


class FixedWindowRateLimiter:
    """
    Fixed-window request counter keyed by client IP.

    Each IP may issue ``max_requests`` requests per ``window_seconds``; the
    window starts at the first request and resets once it has elapsed.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        """Forget clients whose window has already expired."""
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now

    def hit(self, key: str) -> Optional[int]:
        """Record a request. Returns None when allowed, else seconds until the window resets."""
        now = self.clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        started, count = self._windows.get(key, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0

        if count >= self.max_requests:
            self._windows[key] = (started, count)
            return max(1, math.ceil(self.window_seconds - (now - started)))

        self._windows[key] = (started, count + 1)
        return None

    def __len__(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        self._windows.clear()
        self._last_sweep = self.clock()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests above the per-IP quota with a 429."""

    def __init__(self, app, limiter: FixedWindowRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.limiter.hit(client_ip)
        if retry_after is not None:
            logger.warning("Rate limit exceeded", client_ip=client_ip, path=request.url.path)
            exc = RateLimitExceededException(retry_after=retry_after)
            return error_response(
                request,
                exc.status_code,
                exc.__class__.__name__,
                exc.message,
                exc.details,
                exc.headers,
            )
        return await call_next(request)


def setup_middleware(app):
    """Setup all middleware for the application."""
    settings = get_settings()

    limiter = FixedWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.rate_limiter = limiter

    # Starlette runs the last added middleware first, so the correlation ID
    # must be added last to be visible to the logging and quota layers.
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )

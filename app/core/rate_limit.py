"""
Rate limiting for load test endpoints.

Every accepted load test makes the service issue up to several hundred
outbound requests, so starting tests is limited per client on top of the
engine's hard ceilings.
"""
import time
from datetime import datetime

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import RateLimitExceededError
from app.core.metrics import record_rate_limit_exceeded
from app.log.logging import logger

LOAD_TEST_PATHS = ("/load-testing", "/v1/load-testing")


class InMemoryRateLimiter:
    """
    Simple in-memory rate limiter using sliding window algorithm.

    Note: This implementation is suitable for single-instance deployments.
    """

    def __init__(self):
        self._windows: dict[str, list[tuple[float, int]]] = {}
        self._cleanup_interval = 3600
        self._last_cleanup = time.time()

    def _parse_limit(self, limit_str: str) -> tuple[int, int]:
        """
        Parse limit string like "30/hour" or "5/minute".

        Returns:
            Tuple of (max_requests, window_seconds).
        """
        parts = limit_str.split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid limit format: {limit_str}")

        count = int(parts[0])
        period = parts[1].strip().lower()

        period_seconds = {
            "second": 1,
            "minute": 60,
            "hour": 3600,
            "day": 86400
        }.get(period)

        if period_seconds is None:
            raise ValueError(f"Invalid period: {period}")

        return count, period_seconds

    def _cleanup_old_entries(self):
        """Remove expired entries to prevent memory leaks."""
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - 86400
        for client_id in list(self._windows.keys()):
            self._windows[client_id] = [
                (ts, count) for ts, count in self._windows[client_id]
                if ts > cutoff
            ]
            if not self._windows[client_id]:
                del self._windows[client_id]

        self._last_cleanup = now

    def check_rate_limit(
        self,
        client_id: str,
        limit_str: str,
        increment: int = 1
    ) -> tuple[bool, int, int, datetime]:
        """
        Check if a request is within rate limits.

        Args:
            client_id: Unique identifier for the caller.
            limit_str: Limit string like "30/hour".
            increment: Number of requests to add (default 1).

        Returns:
            Tuple of (allowed, remaining, limit, reset_at).
        """
        self._cleanup_old_entries()

        max_requests, window_seconds = self._parse_limit(limit_str)
        now = time.time()
        window_start = now - window_seconds

        current_window = [
            (ts, count) for ts, count in self._windows.get(client_id, [])
            if ts > window_start
        ]
        total_requests = sum(count for _, count in current_window)
        remaining = max(0, max_requests - total_requests)

        if current_window:
            reset_timestamp = min(ts for ts, _ in current_window) + window_seconds
        else:
            reset_timestamp = now + window_seconds
        reset_at = datetime.fromtimestamp(reset_timestamp)

        if total_requests + increment > max_requests:
            self._windows[client_id] = current_window
            return False, remaining, max_requests, reset_at

        current_window.append((now, increment))
        self._windows[client_id] = current_window

        return True, remaining - increment, max_requests, reset_at

    def reset(self) -> None:
        """Forget every recorded request."""
        self._windows.clear()

    def get_headers(self, remaining: int, limit: int, reset_at: datetime) -> dict:
        """Get rate limit headers for response."""
        return {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(int(reset_at.timestamp()))
        }


# Global rate limiter instance
_rate_limiter = InMemoryRateLimiter()


def get_rate_limiter() -> InMemoryRateLimiter:
    """Get the global rate limiter instance."""
    return _rate_limiter


def get_client_identifier(request: Request) -> str:
    """
    Extract the caller identifier from the request.

    Uses the first X-Forwarded-For address when present, otherwise the peer IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"

    return f"ip:{ip}"


class RateLimitMiddleware:
    """
    Middleware limiting how often a client may start a load test.

    Usage:
        app.add_middleware(RateLimitMiddleware)
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not settings.rate_limit_enabled:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)

        # Only starting a load test is limited; preflights and probes pass through
        path = request.url.path.rstrip("/")
        if request.method != "POST" or path not in LOAD_TEST_PATHS:
            await self.app(scope, receive, send)
            return

        client_id = get_client_identifier(request)
        limiter = get_rate_limiter()

        allowed, remaining, limit, reset_at = limiter.check_rate_limit(
            client_id=client_id,
            limit_str=settings.rate_limit_load_tests
        )
        headers = limiter.get_headers(max(remaining, 0), limit, reset_at)

        if not allowed:
            retry_after = max(1, int((reset_at - datetime.now()).total_seconds()))

            logger.warning(
                "Rate limit exceeded for {client_id}",
                client_id=client_id,
                path=path,
                event_type="rate_limit_exceeded"
            )
            record_rate_limit_exceeded(path)

            error = RateLimitExceededError(retry_after=retry_after, headers=headers)
            response = JSONResponse(
                status_code=error.status_code, content=error.detail, headers=error.headers
            )
            await response(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                raw_headers = list(message.get("headers", []))
                for key, value in headers.items():
                    raw_headers.append((key.lower().encode(), value.encode()))
                message["headers"] = raw_headers
            await send(message)

        await self.app(scope, receive, send_with_headers)

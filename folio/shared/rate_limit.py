"""
IP-based rate limiting

Fixed-window request counter per client address, applied to /api paths.
Counters live in process memory and reset with the process.
"""

import os
import time
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import Response

from folio.shared.errors import error_response

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW_MS = int(os.getenv("RATE_LIMIT_WINDOW_MS", "900000"))  # 15 minutes
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@dataclass
class _Window:
    started_at: float
    count: int = 0


class FixedWindowLimiter:
    """Counts hits per key inside consecutive windows of equal length."""

    def __init__(self, window_seconds: float, max_requests: int):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._windows: Dict[str, _Window] = {}

    def hit(self, key: str, now: Optional[float] = None) -> tuple[bool, int, float]:
        """
        Record a hit for key.

        Returns:
            Tuple of (allowed, remaining, seconds_until_reset)
        """
        now = time.monotonic() if now is None else now
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            self._prune(now)
            window = _Window(started_at=now)
            self._windows[key] = window

        window.count += 1
        reset_in = max(0.0, self.window_seconds - (now - window.started_at))
        remaining = max(0, self.max_requests - window.count)
        return window.count <= self.max_requests, remaining, reset_in

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now - w.started_at >= self.window_seconds]
        for key in expired:
            del self._windows[key]


def setup_rate_limit(app: FastAPI, path_prefix: str = "/api") -> FixedWindowLimiter:
    """Add the rate limiter middleware for paths under path_prefix."""
    limiter = FixedWindowLimiter(
        window_seconds=RATE_LIMIT_WINDOW_MS / 1000,
        max_requests=RATE_LIMIT_MAX_REQUESTS,
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next) -> Response:
        if not request.url.path.startswith(path_prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = limiter.hit(client_ip)
        headers = {
            "RateLimit-Limit": str(limiter.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(int(reset_in + 0.999)),
        }

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            headers["Retry-After"] = headers["RateLimit-Reset"]
            return error_response(
                message=RATE_LIMIT_MESSAGE,
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=headers,
            )

        response = await call_next(request)
        for name, value in headers.items():
            response.headers.setdefault(name, value)
        return response

    return limiter

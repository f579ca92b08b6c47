"""
Per-client rate limiting for the proxy functions.

Every function call costs money at a third-party provider, so each client IP
gets a sliding window of calls shared across all endpoints.
"""

import logging
import os
import time
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    """Outcome of a single rate limit check."""
    allowed: bool
    remaining: int
    reset_time: float
    retry_after: Optional[int] = None


class RateLimiter:
    """
    Sliding window rate limiter keyed by client id.

    Calls older than ``window_seconds`` fall out of the window; a client may
    make at most ``requests_per_minute`` calls inside it.
    """

    def __init__(
        self,
        requests_per_minute: Optional[int] = None,
        window_seconds: int = 60,
        clock=time.monotonic,
    ):
        self.requests_per_minute = requests_per_minute or int(
            os.getenv("RATE_LIMIT_REQUESTS_PER_MINUTE", "60")
        )
        self.window_seconds = window_seconds
        self._clock = clock
        self._calls: dict[str, deque[float]] = {}
        self._lock = Lock()

    def check(self, client_id: str) -> RateLimitResult:
        """Record a call for ``client_id`` if it fits in the window."""
        now = self._clock()
        window_start = now - self.window_seconds

        with self._lock:
            self._prune(window_start)
            calls = self._calls.setdefault(client_id, deque())

            reset_time = (calls[0] if calls else now) + self.window_seconds

            if len(calls) >= self.requests_per_minute:
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_time=reset_time,
                    retry_after=int(reset_time - now) + 1,
                )

            calls.append(now)
            return RateLimitResult(
                allowed=True,
                remaining=self.requests_per_minute - len(calls),
                reset_time=reset_time,
            )

    def _prune(self, window_start: float) -> None:
        """Drop expired calls, forgetting clients with none left. Caller holds the lock."""
        for client_id in list(self._calls):
            calls = self._calls[client_id]
            while calls and calls[0] <= window_start:
                calls.popleft()
            if not calls:
                del self._calls[client_id]

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._calls)

    def reset(self, client_id: str) -> None:
        with self._lock:
            self._calls.pop(client_id, None)

    def reset_all(self) -> None:
        with self._lock:
            self._calls.clear()


_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the process-wide rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def client_id_for(request: Request) -> str:
    """First hop of X-Forwarded-For, else the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency rejecting clients over their budget with 429."""
    client_id = client_id_for(request)
    result = get_rate_limiter().check(client_id)
    if not result.allowed:
        logger.warning(f"Rate limit exceeded for client: {client_id}")
        raise HTTPException(
            status_code=429,
            detail={"error": "Too many requests", "retry_after": result.retry_after},
        )

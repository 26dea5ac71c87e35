"""
Per-client admission filter for the gateway.

In-memory sliding window of request timestamps keyed by client address.
Counters live in this process only and reset on restart.
"""

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from platform_common.errors import RateLimited, error_response

logger = logging.getLogger(__name__)


@dataclass
class AdmissionResult:
    allowed: bool
    current: int
    limit: int
    retry_after: int = 0


class SlidingWindowLimiter:
    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        # Requests run on worker threads as well as the event loop
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _sweep_idle(self, now: float, cutoff: float) -> None:
        """Drop clients whose whole window has expired, at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        idle = [client for client, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for client in idle:
            del self._hits[client]
        self._last_sweep = now

    def check(self, client_id: str) -> AdmissionResult:
        """Record a hit for client_id unless its window is already full."""
        with self._lock:
            now = self._clock()
            cutoff = now - self.window_seconds
            self._sweep_idle(now, cutoff)
            hits = self._hits.setdefault(client_id, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= self.max_requests:
                oldest = hits[0] if hits else now
                retry_after = max(1, math.ceil(oldest + self.window_seconds - now))
                return AdmissionResult(
                    allowed=False,
                    current=len(hits),
                    limit=self.max_requests,
                    retry_after=retry_after,
                )

            hits.append(now)
            return AdmissionResult(allowed=True, current=len(hits), limit=self.max_requests)


def client_address(request: Request) -> str:
    if request.client:
        return request.client.host
    return "unknown"


class AdmissionMiddleware(BaseHTTPMiddleware):
    """Rejects over-limit clients before routing, authentication or forwarding."""

    def __init__(self, app, limiter: SlidingWindowLimiter, path_prefix: str = "/api/"):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_id = client_address(request)
        result = self.limiter.check(client_id)
        if not result.allowed:
            logger.info(f"Rate limited {client_id} on {request.method} {request.url.path} ({result.current}/{result.limit})")
            exc = RateLimited(retry_after=result.retry_after)
            return error_response(exc.status_code, exc.message, {"Retry-After": str(exc.retry_after)})

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, result.limit - result.current))
        return response

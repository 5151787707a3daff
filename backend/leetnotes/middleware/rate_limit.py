"""
LeetNotes Backend — Rate Limiting Middleware
==============================================

What:  Per-IP sliding window limit on the two expensive endpoints.
How:   In-memory list of request timestamps per client IP; entries older than
       RATE_LIMIT_WINDOW seconds are dropped on every check.
Who:   Applied to every request; only these paths are counted:
           POST /api/fetch-data            (spawns the LeetCode fetcher)
           POST /api/generate-notes/{id}   (one Gemini call)
       Reads are never limited.

Algorithm: Sliding Window Log
    1. Drop timestamps older than now - window
    2. If RATE_LIMIT_REQUESTS remain → 429 with Retry-After
    3. Otherwise record now and pass the request on

Single-process only: each uvicorn worker keeps its own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from leetnotes.config import settings
from leetnotes.exceptions import RateLimitExceededError
from leetnotes.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LIMITED_PATH_PREFIXES = ("/api/fetch-data", "/api/generate-notes")
CLEANUP_EVERY = 1000


def is_rate_limited_path(method: str, path: str) -> bool:
    return method == "POST" and path.startswith(LIMITED_PATH_PREFIXES)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings):
        rate_limit_requests: Max counted requests per window (default 30)
        rate_limit_window:   Window length in seconds (default 3600)
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._checks = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not is_rate_limited_path(request.method, request.url.path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s on %s: %d requests in %ds window",
                client_ip,
                request.url.path,
                len(timestamps),
                settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_body(request_id_var.get("")),
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        self._checks += 1
        if self._checks % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Forget IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))

"""Per-IP sliding window rate limiter for the LLM endpoint.

Every /llm/message call costs a vendor request, so it is throttled per
client. In-memory: resets on restart and is not shared between workers.
"""

from __future__ import annotations

import time
from collections import deque

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding window rate limiter keyed by client IP and exact path.

    Parameters
    ----------
    limits : dict[str, int]
        Exact path → max requests per window, e.g. ``{"/llm/message": 20}``.
        Paths not listed are never throttled. A limit of 0 disables the rule.
    window_seconds : int
        Sliding window duration (default 60).
    """

    def __init__(
        self,
        app: object,
        *,
        limits: dict[str, int],
        window_seconds: int = 60,
    ) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self.limits = {path: n for path, n in limits.items() if n > 0}
        self.window_seconds = window_seconds
        self._hits: dict[tuple[str, str], deque[float]] = {}
        self._last_sweep = time.monotonic()

    def _sweep(self, window_start: float) -> None:
        """Forget clients whose newest hit has left the window."""
        stale = [key for key, hits in self._hits.items() if hits[-1] <= window_start]
        for key in stale:
            del self._hits[key]

    def _retry_after(self, key: tuple[str, str], limit: int) -> int | None:
        """Record a hit for ``key``; return seconds to wait if over the limit."""
        now = time.monotonic()
        window_start = now - self.window_seconds
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(window_start)
            self._last_sweep = now

        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= limit:
            return int(hits[0] - window_start) + 1

        hits.append(now)
        return None

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        limit = self.limits.get(path)
        if limit is None:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        retry_after = self._retry_after((client_ip, path), limit)
        if retry_after is not None:
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again shortly."},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

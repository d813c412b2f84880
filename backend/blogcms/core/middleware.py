from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from blogcms.core.logging import log
from blogcms.core.redis import COUNTS_KEY, LATENCY_KEY, STATUS_KEY, get_redis

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000.0
        r = get_redis()
        if r is not None:
            try:
                r.lpush(LATENCY_KEY, f"{ms:.3f}")
                r.ltrim(LATENCY_KEY, 0, 499)
                r.hincrby(COUNTS_KEY, "requests", 1)
                r.hincrby(STATUS_KEY, str(response.status_code), 1)
            except Exception:
                # metrics must never break the API
                log.debug("metrics write failed", exc_info=True)
        response.headers["Server-Timing"] = f"app;dur={ms:.2f}"
        return response

"""
Storefront Backend: Request Logging Middleware
=================================================

What:  One access log line per request: method, path, status, duration,
       request ID, client IP and whether the admin key was presented.
Why:   Uvicorn's access log has no request ID correlation and no durations.

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID, upload size
    ❌ Don't log: request bodies (uploads, customer data), the X-Admin-Key value

Quiet paths:
    /health and /api/files/* are skipped; probes and image fetches would
    drown the catalogue and admin traffic.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from storefront.middleware.request_id import request_id_var

logger = logging.getLogger("storefront.access")

QUIET_PREFIXES = ("/health", "/api/files/")

# Requests slower than this are logged at WARNING even when they succeed
SLOW_REQUEST_MS = 2000


def level_for(status: int, duration_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400 or duration_ms > SLOW_REQUEST_MS:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request with its outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(QUIET_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        admin = "X-Admin-Key" in request.headers
        body_bytes = request.headers.get("content-length", "0")

        logger.log(
            level_for(response.status_code, duration_ms),
            "%s %s %d %.1fms [%s] from %s%s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            rid,
            client_ip,
            " (admin)" if admin else "",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "admin": admin,
                "body_bytes": body_bytes,
            },
        )
        return response

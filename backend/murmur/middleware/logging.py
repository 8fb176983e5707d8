"""
Murmur Backend — Request Logging Middleware
=============================================

What:  One access-log line per request.
How:   Times the request and logs method, path, status, duration, request id,
       client IP and, for authenticated requests, the caller's user id
       (set on request.state by the session dependency).

Level by status:  5xx → ERROR, 4xx → WARNING, otherwise INFO.
Never logged:     request bodies (passwords, image payloads) and cookies.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from murmur.middleware.request_id import request_id_var

logger = logging.getLogger("murmur.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request/response pair except health probes."""

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        user_id = getattr(request.state, "user_id", None) or "-"

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )

        return response

"""
SkillSwap Backend: Request Logging Middleware
=============================================

What:  One access-log line per HTTP request with status and duration.
How:   Level follows the status class (5xx ERROR, 4xx WARNING, else INFO), so
       rejected transitions (403 / 400 invalid_state) stand out from normal
       traffic. Structured fields are attached via `extra` for JSON handlers.

Logged:     method, path, status, duration, client IP, user agent, request ID
Not logged: bodies (profile data, messages), query strings (search terms)
            and Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from skillswap.middleware.request_id import request_id_var

logger = logging.getLogger("skillswap.access")

# Polled by load balancers every few seconds
QUIET_PATHS = frozenset({"/health", "/api/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
            "client_ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
        }
        logger.log(
            level_for_status(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] from %(client_ip)s",
            fields,
            extra=fields,
        )
        return response

"""
Pokédex API: Request Logging Middleware
========================================

What:  One access log line per HTTP request on the `pokedex.access` logger.
How:   Times the downstream call and logs method, path, status, duration,
       request id and client address. Level follows the status class:
       5xx → ERROR, 4xx → WARNING, otherwise INFO.
When:  Inside RequestIDMiddleware, so the request id is already set.

Example line:
    2024-05-01 12:00:00,000 [INFO] pokedex.access: POST /pokemon 201 42.7ms [1f3a9c2e] from 10.0.0.7

Request bodies and uploaded images are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pokedex.middleware.request_id import request_id_var

logger = logging.getLogger("pokedex.access")

# Probed every few seconds by load balancers.
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request's outcome and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response

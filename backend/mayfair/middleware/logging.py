"""
Mayfair Backend — Request Logging Middleware
==============================================

What:  One access-log line per request under the `mayfair.access` logger.
How:   Times the downstream call and logs method, path, status, duration,
       request ID and client address. The level follows the status class.
When:  Inside RequestIDMiddleware, so the request ID is already known.

Log line:
    GET /api/v1/rooms 200 12.3ms [a1b2c3d4] from 203.0.113.7

Not logged: request bodies, query strings, Authorization and Cookie headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mayfair.middleware.request_id import request_id_var

logger = logging.getLogger("mayfair.access")

# Probed every few seconds by the hosting platform
SKIPPED_PATHS = {"/health"}


def client_address(request: Request, trust_proxy: bool) -> str:
    """First X-Forwarded-For hop when behind a trusted proxy, else the peer."""
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Level by status:
        5xx → ERROR, 4xx → WARNING, everything else → INFO

    Requests that raise show up here as 500s; ErrorBoundaryMiddleware logs
    the traceback.
    """

    def __init__(self, app, trust_proxy: bool = True):
        super().__init__(app)
        self.trust_proxy = trust_proxy

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
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
        client_ip = client_address(request, self.trust_proxy)
        logger.log(
            log_level,
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

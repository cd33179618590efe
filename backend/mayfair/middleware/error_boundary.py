"""
Mayfair Backend — Error Boundary Middleware
=============================================

What:  Turns any unhandled exception from a route or feature router into the
       generic 500 INTERNAL_SERVER_ERROR envelope.
How:   Innermost middleware: the 500 it returns travels back out through
       CORS, security headers, access logging and the request ID middleware
       like any other response.
When:  HTTPException and validation errors never reach it; FastAPI's
       exception middleware (further in) has already answered those.

Security: the exception text and traceback go to the log only, tagged with
the request ID the guest sees in X-Request-ID.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from mayfair.middleware.request_id import request_id_var
from mayfair.schemas.envelope import error_body

logger = logging.getLogger(__name__)


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log `exc` with its traceback and build the client-facing 500."""
    rid = getattr(request.state, "request_id", "") or request_id_var.get("")
    logger.error(
        "[%s] Global error on %s %s: %s",
        rid,
        request.method,
        request.url.path,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_SERVER_ERROR", "Something went wrong"),
    )


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return internal_error_response(request, exc)

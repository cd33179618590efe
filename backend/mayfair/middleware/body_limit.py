"""
Mayfair Backend — Request Body Size Limit
===========================================

What:  Refuses requests whose declared Content-Length exceeds max_body_size.
How:   Header check only, before the body is read; returns 413 with the
       standard error envelope.
When:  First middleware in the chain.

Chunked uploads without a Content-Length are not counted here; feature
routers that accept them (upload) enforce their own limits.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from mayfair.schemas.envelope import error_body

logger = logging.getLogger(__name__)


def format_size(num_bytes: int) -> str:
    """10485760 → '10mb', 2048 → '2kb', 900 → '900b'."""
    for unit, factor in (("mb", 1024 * 1024), ("kb", 1024)):
        if num_bytes >= factor and num_bytes % factor == 0:
            return f"{num_bytes // factor}{unit}"
    return f"{num_bytes}b"


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_body_size: int):
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                length = int(declared)
            except ValueError:
                return JSONResponse(
                    error_body("BAD_REQUEST", "Invalid Content-Length header"),
                    status_code=400,
                )
            if length > self.max_body_size:
                logger.warning(
                    "Rejected %s %s: body of %d bytes exceeds %d",
                    request.method,
                    request.url.path,
                    length,
                    self.max_body_size,
                )
                return JSONResponse(
                    error_body(
                        "PAYLOAD_TOO_LARGE",
                        f"Request body exceeds the {format_size(self.max_body_size)} limit",
                    ),
                    status_code=413,
                )
        return await call_next(request)

"""
Mayfair Backend — Route Unavailable Fallback
==============================================

What:  Stand-in handler mounted where a required feature router failed to load.
How:   Answers every request under its mount path, whatever the method, query
       or body, with the same 503 ROUTE_UNAVAILABLE envelope.
Who:   Built by the module loader, one per failed required module.
When:  Created at startup; serves for the life of the process. No retry or
       recovery happens here; a restart is the only way back.

Example response (bookings failed with "DB unreachable"):
    HTTP/1.1 503 Service Unavailable
    {
        "success": false,
        "error": {
            "code": "ROUTE_UNAVAILABLE",
            "message": "bookings routes are temporarily unavailable",
            "details": "DB unreachable"
        }
    }
"""

from starlette.responses import JSONResponse, Response
from starlette.types import Receive, Scope, Send
from starlette.websockets import WebSocketClose

from mayfair.schemas.envelope import error_body

ROUTE_UNAVAILABLE = "ROUTE_UNAVAILABLE"

# RFC 6455 "Try Again Later"
WS_TRY_AGAIN_LATER = 1013


class RouteUnavailableHandler:
    """
    Stateless ASGI handler returning a fixed 503 for one failed module.

    The body is rendered once in __init__, so every response is
    byte-identical for the lifetime of the process.
    """

    status_code = 503

    def __init__(self, name: str, details: str):
        self.name = name
        self.details = details
        self.body = JSONResponse(
            error_body(
                ROUTE_UNAVAILABLE,
                f"{name} routes are temporarily unavailable",
                details,
            )
        ).body

    def __repr__(self) -> str:
        return f"RouteUnavailableHandler(name={self.name!r}, details={self.details!r})"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "websocket":
            await WebSocketClose(code=WS_TRY_AGAIN_LATER)(scope, receive, send)
            return
        response = Response(
            content=self.body,
            status_code=self.status_code,
            media_type="application/json",
        )
        await response(scope, receive, send)

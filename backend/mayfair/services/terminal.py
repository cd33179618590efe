"""
Mayfair Backend — Terminal Fallback
=====================================

What:  Final stop for every request no mounted handler claimed.
How:   Two branches, chosen by path:

    API path (/api, /api/...)
        routes_loaded=True   → 404 NOT_FOUND "API endpoint not found"
        routes_loaded=False  → 503 SERVICE_UNAVAILABLE (startup failed)

    Anything else (frontend)
        GET/HEAD + asset exists      → the file (Starlette StaticFiles)
        GET/HEAD + no such asset     → SPA entry document, 200
        SPA document unreadable      → 500 STATIC_FILE_ERROR
        other methods                → 404 NOT_FOUND

Who:   Constructed by create_app() with the StartupState's routes_loaded
       value; wrapped by MountTableDispatcher.
"""

import logging
import os

import aiofiles
from starlette.exceptions import HTTPException
from starlette.responses import HTMLResponse, JSONResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Receive, Scope, Send
from starlette.websockets import WebSocketClose

from mayfair.schemas.envelope import error_body
from mayfair.services.mount_table import route_path

logger = logging.getLogger(__name__)

FRONTEND_METHODS = {"GET", "HEAD"}


class TerminalFallback:
    """
    ASGI app answering unmatched requests.

    Args:
        routes_loaded:  Outcome of the startup orchestration
        api_prefix:     Paths at or under this prefix are API paths
        static_dir:     Frontend build directory (may not exist)
        index_file:     SPA entry document, relative to static_dir
    """

    def __init__(
        self,
        *,
        routes_loaded: bool,
        api_prefix: str = "/api",
        static_dir: str,
        index_file: str = "index.html",
    ):
        self.routes_loaded = routes_loaded
        self.api_prefix = api_prefix
        self.index_path = os.path.join(static_dir, index_file)
        # check_dir=False: a missing build is reported per request, not at startup
        self.static_files = StaticFiles(directory=static_dir, check_dir=False)

    def is_api_path(self, path: str) -> bool:
        return path == self.api_prefix or path.startswith(self.api_prefix + "/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await WebSocketClose()(scope, receive, send)
            return

        path = route_path(scope)
        if self.is_api_path(path):
            response = self.api_response()
        elif scope["method"] in FRONTEND_METHODS:
            response = await self.frontend_response(scope)
        else:
            response = JSONResponse(error_body("NOT_FOUND", "Resource not found"), status_code=404)
        await response(scope, receive, send)

    def api_response(self) -> Response:
        if not self.routes_loaded:
            return JSONResponse(
                error_body(
                    "SERVICE_UNAVAILABLE",
                    "API routes are temporarily unavailable - server initialization failed",
                ),
                status_code=503,
            )
        return JSONResponse(error_body("NOT_FOUND", "API endpoint not found"), status_code=404)

    async def frontend_response(self, scope: Scope) -> Response:
        try:
            return await self.static_files.get_response(self.static_files.get_path(scope), scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
        return await self.index_response()

    async def index_response(self) -> Response:
        """Read the SPA entry document fresh, so a redeployed build is picked up."""
        try:
            async with aiofiles.open(self.index_path, mode="rb") as f:
                content = await f.read()
        except OSError as exc:
            logger.error("Unable to serve frontend entry document %s: %s", self.index_path, exc)
            return JSONResponse(
                error_body("STATIC_FILE_ERROR", "Unable to serve frontend files"),
                status_code=500,
            )
        return HTMLResponse(content)

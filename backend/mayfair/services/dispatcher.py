"""
Mayfair Backend — Mount Table Dispatcher
==========================================

What:  ASGI app that routes feature requests through the mount table.
How:   First entry whose mount path covers the request path and that has a
       route for it wins; when a router has no route for the method and path,
       dispatch moves on to the next covering entry and finally to the
       terminal fallback.
Who:   Mounted by create_app() as the last route of the FastAPI app, after
       /health and /api/test.

Dispatch walk for GET /api/v1/rooms/12:
    /api/v1/auth      ✗ prefix does not cover the path
    /api/v1/rooms     ✓ covers it → router has GET /{room_id} → handled
    (terminal)          reached only when nothing above claimed the request
"""

import logging

from starlette.types import ASGIApp, Receive, Scope, Send

from mayfair.services.mount_table import MountTable, route_path

logger = logging.getLogger(__name__)


class MountTableDispatcher:
    """
    First-match-wins dispatcher over a fixed MountTable.

    The table and the terminal app are set once in __init__ and only read
    afterwards, so concurrent requests share them without locking.
    """

    def __init__(self, mount_table: MountTable, terminal: ASGIApp):
        self.mount_table = mount_table
        self.terminal = terminal

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        path = route_path(scope)
        for entry in self.mount_table.candidates(path):
            handler_scope = entry.resolve(entry.child_scope(scope))
            if handler_scope is None:
                logger.debug(
                    "%s routes have no match for %s %s, passing on",
                    entry.name,
                    scope.get("method", ""),
                    path,
                )
                continue
            await entry.handler(handler_scope, receive, send)
            return
        await self.terminal(scope, receive, send)

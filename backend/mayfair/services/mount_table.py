"""
Mayfair Backend — Mount Table
===============================

What:  The ordered, read-only list of (mount path, handler) pairs that the
       request dispatcher walks for every feature request.
How:   Built once by the module loader; entries are frozen dataclasses held
       in a tuple, so nothing can add, remove or reorder them afterwards.

Matching rules (prefix on path-segment boundaries):
    /api/v1/rooms          matches /api/v1/rooms
                           matches /api/v1/rooms/12/availability
                   does NOT match /api/v1/roomservice

Handing a request to an entry mirrors Starlette's Mount: the path is left
untouched and the mount path is appended to `root_path`, so a router
mounted at /api/v1/rooms sees /12/availability as its route path, and a
request for /api/v1/rooms itself reaches the router's "/" route.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from starlette.routing import Match
from starlette.types import ASGIApp, Scope


def route_path(scope: Scope) -> str:
    """Request path relative to the scope's root_path."""
    path: str = scope["path"]
    root_path: str = scope.get("root_path", "")
    if not root_path or not path.startswith(root_path):
        return path
    remainder = path[len(root_path):]
    if remainder and not remainder.startswith("/"):
        return path
    return remainder or "/"


@dataclass(frozen=True)
class MountEntry:
    """
    One mounted handler.

    Attributes:
        name:      Feature name the entry was declared under
        path:      Mount path (leading '/', no trailing '/')
        handler:   ASGI application receiving matching requests
        fallback:  True when `handler` is a synthesized ROUTE_UNAVAILABLE handler
    """

    name: str
    path: str
    handler: ASGIApp
    fallback: bool = False

    def matches(self, path: str) -> bool:
        return path == self.path or path.startswith(self.path + "/")

    def child_scope(self, scope: Scope) -> Scope:
        root_path = scope.get("root_path", "")
        child = {
            **scope,
            "app_root_path": scope.get("app_root_path", root_path),
            "root_path": root_path + self.path,
        }
        # The mount point itself is the handler's "/" route
        if route_path(scope) == self.path:
            child["path"] = scope["path"] + "/"
        return child

    def resolve(self, child_scope: Scope) -> Optional[Scope]:
        """
        Scope to hand to the handler, or None when it has nothing for the request.

        Routers (anything exposing Starlette `routes`) only take requests one
        of their routes matches in full, method included; a known path with
        another method is passed on like an unknown one. A path that only
        matches with its trailing slash toggled (/rooms/101/ for /{room_id})
        is handed over in that form.
        Any other ASGI handler takes everything under its mount path.
        """
        routes = getattr(self.handler, "routes", None)
        if routes is None:
            return child_scope
        if _fully_matched(routes, child_scope):
            return child_scope
        if child_scope["type"] == "http" and route_path(child_scope) != "/":
            path: str = child_scope["path"]
            toggled = {
                **child_scope,
                "path": path.rstrip("/") if path.endswith("/") else path + "/",
            }
            if _fully_matched(routes, toggled):
                return toggled
        return None


def _fully_matched(routes, scope: Scope) -> bool:
    for route in routes:
        match, _ = route.matches(scope)
        if match is Match.FULL:
            return True
    return False


class MountTable:
    """Immutable, ordered collection of MountEntry objects."""

    def __init__(self, entries: Iterable[MountEntry] = ()):
        self._entries: Tuple[MountEntry, ...] = tuple(entries)

    def __iter__(self) -> Iterator[MountEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MountTable({[entry.path for entry in self._entries]!r})"

    @property
    def entries(self) -> Tuple[MountEntry, ...]:
        return self._entries

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(entry.path for entry in self._entries)

    def get(self, path: str) -> Optional[MountEntry]:
        """Entry mounted exactly at `path`, or None."""
        for entry in self._entries:
            if entry.path == path:
                return entry
        return None

    def candidates(self, path: str) -> Iterator[MountEntry]:
        """Entries whose mount path covers `path`, in mount order."""
        return (entry for entry in self._entries if entry.matches(path))

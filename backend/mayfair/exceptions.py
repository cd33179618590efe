"""
Mayfair Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions raised while assembling the server.
How:   Each exception class carries a message and optional context dict.
Who:   Raised by the route registry and module loader; caught by the
       startup orchestration (never by request handlers).
When:  At startup only. Nothing here is raised while serving a request.

Exception Hierarchy:
    MayfairError (base)
    ├── ModuleLoadError   → a feature factory gave back no usable handler
    │                       (recovered per module with a 503 fallback route)
    └── MountTableError   → the declared mount paths are inconsistent
                            (an orchestration failure: API answers 503)
"""

from typing import Any, Dict, Optional


class MayfairError(Exception):
    """
    Base exception for all Mayfair application errors.

    Attributes:
        message:  Human-readable description, also used as str(exc)
        context:  Additional debug info (logged, never returned to clients)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ModuleLoadError(MayfairError):
    """
    Raised when a feature module imports fine but cannot be mounted.

    When:    The module has no `router` attribute, or it is not callable.
    Effect:  Treated like any other factory failure: the message becomes
             the `details` field of the module's ROUTE_UNAVAILABLE response.
    """

    def __init__(
        self,
        module: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["module"] = module
        super().__init__(message=message, context=ctx)
        self.module = module


class MountTableError(MayfairError):
    """
    Raised when the declared handler specs cannot form a mount table.

    When:    Two specs share a mount path, a spec claims a path reserved by
             the terminal fallback, or a mount path is malformed.
    Effect:  Aborts the whole orchestration; the server keeps running with
             no feature routes and answers SERVICE_UNAVAILABLE on the API.
    """

    def __init__(
        self,
        message: str,
        mount_path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if mount_path is not None:
            ctx["mount_path"] = mount_path
        super().__init__(message=message, context=ctx)
        self.mount_path = mount_path

"""
Mayfair Backend — Feature Route Registry
==========================================

What:  Declarative list of every feature router the server mounts.
How:   Each HandlerSpec names a module, its mount path and a zero-argument
       factory. The default factories import `<feature_package>.<name>` and
       return its module-level `router`.
Who:   Read by main.create_app(); tests build their own spec lists with
       factories that succeed or raise on demand.
When:  Evaluated once, in declaration order, during startup.

Feature inventory:
    Required (always mounted: real router or 503 fallback):
        auth, users, dashboard, rooms, bookings, restaurant, upload
    Optional (mounted only when they load):
        reports, payments
"""

import importlib
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, List

from starlette.types import ASGIApp

from mayfair.config import Settings
from mayfair.exceptions import ModuleLoadError

# Order matters: this is the mount (and therefore dispatch) order.
REQUIRED_FEATURES = (
    "auth",
    "users",
    "dashboard",
    "rooms",
    "bookings",
    "restaurant",
    "upload",
)

OPTIONAL_FEATURES = (
    "reports",
    "payments",
)


@dataclass(frozen=True)
class HandlerSpec:
    """
    Declarative description of one feature module.

    Attributes:
        name:        Short identifier used in logs and error messages ("bookings")
        mount_path:  URL prefix the handler is mounted at ("/api/v1/bookings")
        factory:     Zero-argument callable returning an ASGI handler, or raising
    """

    name: str
    mount_path: str
    factory: Callable[[], Any]


def import_router(module_path: str, attribute: str = "router") -> ASGIApp:
    """
    Import a feature module and return its router.

    Raises:
        ImportError:      The module (or one of its own imports) is missing.
        ModuleLoadError:  The module has no `attribute`, or it is not callable.
        Exception:        Whatever the module raises while being imported
                          (bad configuration, unreachable database, ...).
    """
    module = importlib.import_module(module_path)
    handler = getattr(module, attribute, None)
    if handler is None:
        raise ModuleLoadError(
            module=module_path,
            message=f"Module '{module_path}' does not define '{attribute}'",
        )
    if not callable(handler):
        raise ModuleLoadError(
            module=module_path,
            message=f"'{module_path}.{attribute}' is not an ASGI application",
            context={"type": type(handler).__name__},
        )
    return handler


def import_router_factory(module_path: str, attribute: str = "router") -> Callable[[], ASGIApp]:
    """Defer import_router() until the loader calls the factory."""
    return partial(import_router, module_path, attribute)


def _feature_specs(names, settings: Settings) -> List[HandlerSpec]:
    return [
        HandlerSpec(
            name=name,
            mount_path=f"{settings.api_v1_prefix}/{name}",
            factory=import_router_factory(f"{settings.feature_package}.{name}"),
        )
        for name in names
    ]


def required_handler_specs(settings: Settings) -> List[HandlerSpec]:
    return _feature_specs(REQUIRED_FEATURES, settings)


def optional_handler_specs(settings: Settings) -> List[HandlerSpec]:
    return _feature_specs(OPTIONAL_FEATURES, settings)

"""
Mayfair Backend — Feature Module Loader
=========================================

What:  Turns the declared HandlerSpecs into the mount table, one module at a time.
How:   Calls each factory inside its own try/except, records a LoadResult,
       and mounts either the real router or (for required modules) a
       RouteUnavailableHandler. Optional modules that fail are left out.
Who:   Called once by main.create_app() through initialize_routes().
When:  Strictly sequential, before the application serves its first request.

Failure isolation:
    ┌──────────────┬────────────────────┬──────────────────────────────────┐
    │ What failed  │ Logged as          │ Client sees                      │
    ├──────────────┼────────────────────┼──────────────────────────────────┤
    │ required     │ WARNING + message  │ 503 ROUTE_UNAVAILABLE at its path│
    │ optional     │ INFO + message     │ 404 NOT_FOUND (path not mounted) │
    │ orchestration│ ERROR + traceback  │ 503 SERVICE_UNAVAILABLE, all API │
    └──────────────┴────────────────────┴──────────────────────────────────┘

A failing module never stops the next one from loading; failures are
converted to data (Failed) at the factory boundary.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence, Tuple, Union

from starlette.types import ASGIApp

from mayfair.exceptions import ModuleLoadError, MountTableError
from mayfair.services.fallback import RouteUnavailableHandler
from mayfair.services.mount_table import MountEntry, MountTable
from mayfair.services.registry import HandlerSpec

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Load Results
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Loaded:
    spec: HandlerSpec
    handler: ASGIApp

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    spec: HandlerSpec
    error: str

    @property
    def ok(self) -> bool:
        return False


LoadResult = Union[Loaded, Failed]


@dataclass(frozen=True)
class StartupState:
    """
    Everything the request path needs to know about startup.

    Attributes:
        mount_table:    Dispatch order for feature routers
        results:        One LoadResult per spec that was evaluated
        routes_loaded:  False only when the orchestration itself failed
    """

    mount_table: MountTable
    results: Tuple[LoadResult, ...]
    routes_loaded: bool

    @property
    def failed(self) -> Tuple[Failed, ...]:
        return tuple(result for result in self.results if isinstance(result, Failed))


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


# ══════════════════════════════════════════════════════════════════════════
# Loading
# ══════════════════════════════════════════════════════════════════════════

def load_module(spec: HandlerSpec) -> LoadResult:
    """
    Call one factory and capture the outcome.

    Never raises for factory errors (including ImportError); only
    BaseExceptions such as KeyboardInterrupt get through.
    """
    try:
        handler: Any = spec.factory()
        if not callable(handler):
            raise ModuleLoadError(
                module=spec.name,
                message=f"{spec.name} factory returned {type(handler).__name__}, not an ASGI application",
            )
    except Exception as exc:
        return Failed(spec=spec, error=_describe(exc))
    return Loaded(spec=spec, handler=handler)


def load_required_modules(specs: Iterable[HandlerSpec]) -> List[LoadResult]:
    results = []
    for spec in specs:
        result = load_module(spec)
        if isinstance(result, Loaded):
            logger.info("Loaded %s routes at %s", spec.name, spec.mount_path)
        else:
            logger.warning("Failed to load %s routes: %s", spec.name, result.error)
        results.append(result)
    return results


def load_optional_modules(specs: Iterable[HandlerSpec]) -> List[LoadResult]:
    results = []
    for spec in specs:
        result = load_module(spec)
        if isinstance(result, Loaded):
            logger.info("Loaded %s routes at %s", spec.name, spec.mount_path)
        else:
            logger.info("%s routes not available: %s", spec.name, result.error)
        results.append(result)
    return results


# ══════════════════════════════════════════════════════════════════════════
# Mount Table Construction
# ══════════════════════════════════════════════════════════════════════════

def check_mount_paths(specs: Sequence[HandlerSpec], reserved: Iterable[str] = ()) -> None:
    """
    Validate mount paths before anything is loaded.

    Raises:
        MountTableError: on a malformed, reserved or duplicated mount path.
    """
    reserved_paths = set(reserved)
    seen = {}
    for spec in specs:
        path = spec.mount_path
        if not path.startswith("/") or path.endswith("/") or "//" in path:
            raise MountTableError(
                f"Invalid mount path '{path}' for {spec.name} routes",
                mount_path=path,
            )
        if path in reserved_paths:
            raise MountTableError(
                f"Mount path '{path}' for {spec.name} routes is reserved",
                mount_path=path,
            )
        if path in seen:
            raise MountTableError(
                f"Mount path '{path}' is declared by both {seen[path]} and {spec.name}",
                mount_path=path,
            )
        seen[path] = spec.name


def build_mount_table(
    required: Sequence[LoadResult],
    optional: Sequence[LoadResult] = (),
) -> MountTable:
    """
    Required results always produce an entry (real or fallback);
    optional results only when loaded. Order is preserved.
    """
    entries = []
    for result in required:
        if isinstance(result, Loaded):
            entries.append(MountEntry(result.spec.name, result.spec.mount_path, result.handler))
        else:
            fallback = RouteUnavailableHandler(result.spec.name, result.error)
            entries.append(
                MountEntry(result.spec.name, result.spec.mount_path, fallback, fallback=True)
            )
    for result in optional:
        if isinstance(result, Loaded):
            entries.append(MountEntry(result.spec.name, result.spec.mount_path, result.handler))
    return MountTable(entries)


def initialize_routes(
    required: Iterable[HandlerSpec],
    optional: Iterable[HandlerSpec] = (),
    reserved: Iterable[str] = (),
) -> StartupState:
    """
    Run the whole startup orchestration.

    Per-module failures are absorbed by load_*_modules(). Anything that
    escapes them (bad mount paths, a spec source that raises) is an
    orchestration failure: it is logged, and the returned state has no
    mounted routes and routes_loaded=False.

    Returns:
        StartupState consumed by the dispatcher and the terminal fallback.
    """
    logger.info("Loading routes...")
    try:
        required_specs = list(required)
        optional_specs = list(optional)
        check_mount_paths(required_specs + optional_specs, reserved)

        required_results = load_required_modules(required_specs)
        optional_results = load_optional_modules(optional_specs)
        mount_table = build_mount_table(required_results, optional_results)
    except Exception:
        logger.exception("Critical error loading routes")
        return StartupState(mount_table=MountTable(), results=(), routes_loaded=False)

    results = tuple(required_results + optional_results)
    loaded = sum(1 for result in results if result.ok)
    logger.info(
        "Route loading completed: %d loaded, %d unavailable",
        loaded,
        len(results) - loaded,
    )
    return StartupState(mount_table=mount_table, results=results, routes_loaded=True)

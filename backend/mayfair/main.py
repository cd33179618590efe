"""
Mayfair Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() loads the feature routers, builds the
       mount table and returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn mayfair.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  Body Size → Req ID → Logging → Sec Headers →       │
    │  GZip → CORS → Error Boundary                       │
    │                                                     │
    │  Routes (first match wins):                         │
    │  ┌────────────┐ ┌────────────┐ ┌─────────────────┐  │
    │  │ GET /health│ │ /api/test  │ │ Mount "" →      │  │
    │  └────────────┘ └────────────┘ │ MountTable      │  │
    │                                │ Dispatcher      │  │
    │                                └───────┬─────────┘  │
    │                                        ▼            │
    │                              TerminalFallback       │
    │                                                     │
    │  Exception Handlers:                                │
    │  HTTPException → envelope │ Exception → 500         │
    └─────────────────────────────────────────────────────┘

Startup:
    Feature loading happens inside create_app(), before the app object
    exists for uvicorn, so no request can see a half-built mount table.
    A feature that fails to import costs one 503 route, never the process.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mayfair.config import Settings, settings as default_settings
from mayfair.middleware.body_limit import BodySizeLimitMiddleware
from mayfair.middleware.error_boundary import (
    ErrorBoundaryMiddleware,
    internal_error_response,
)
from mayfair.middleware.logging import RequestLoggingMiddleware
from mayfair.middleware.request_id import RequestIDMiddleware, request_id_var
from mayfair.middleware.security_headers import SecurityHeadersMiddleware
from mayfair.routes import health, system
from mayfair.schemas.envelope import error_body
from mayfair.services.dispatcher import MountTableDispatcher
from mayfair.services.module_loader import initialize_routes
from mayfair.services.registry import (
    HandlerSpec,
    optional_handler_specs,
    required_handler_specs,
)
from mayfair.services.terminal import TerminalFallback

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    429: "TOO_MANY_REQUESTS",
}


# ══════════════════════════════════════════════════════════════════════════
# Structured Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    When:   Once, before the module-level app is created, so the route
            loading messages are emitted with the final configuration.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party access/transport logs duplicate mayfair.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Report what the server came up with; routes are already loaded by now.

    Shutdown has nothing to release: feature routers own their own
    resources.
    """
    cfg: Settings = app.state.settings
    startup = app.state.startup
    logger.info("=" * 60)
    logger.info("%s %s starting (%s)", cfg.app_name, cfg.app_version, cfg.environment)

    if not startup.routes_loaded:
        logger.error("Feature routes failed to initialize; API answers 503 until restart")
    for failed in startup.failed:
        logger.warning("Unavailable: %s (%s)", failed.spec.mount_path, failed.error)

    logger.info("Frontend build: %s", cfg.frontend_build_dir)
    logger.info("Server ready at http://%s:%d", cfg.backend_host, cfg.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        HTTPException           → its own status, error envelope
        RequestValidationError  → 400 VALIDATION_ERROR
        Exception (fallback)    → 500 INTERNAL_SERVER_ERROR

    Security: handlers NEVER put exception text or tracebacks in the
    response body. Details are logged server-side with the request ID.
    """

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Errors raised by feature routers, re-shaped into the envelope."""
        code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        message = exc.detail if isinstance(exc.detail, str) else code.replace("_", " ").capitalize()
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        """Request body/params failed a feature router's schema."""
        errors = exc.errors()
        details = None
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            details = f"{location}: {first.get('msg', 'invalid value')}"
        logger.warning("[%s] Validation error on %s: %s", _request_id(request), request.url.path, details)
        return JSONResponse(
            status_code=400,
            content=error_body("VALIDATION_ERROR", "Request validation failed", details),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Last resort for errors ErrorBoundaryMiddleware never saw (raised by
        the middleware itself). Runs outside the user middleware, so this
        response carries no request ID, CORS or security headers.
        """
        return internal_error_response(request, exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    required_modules: Optional[Sequence[HandlerSpec]] = None,
    optional_modules: Optional[Sequence[HandlerSpec]] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings:      Defaults to the module-level settings singleton
        required_modules:  Defaults to the registry's required feature list
        optional_modules:  Defaults to the registry's optional feature list

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    cfg = app_settings or default_settings
    if required_modules is None:
        required_modules = required_handler_specs(cfg)
    if optional_modules is None:
        optional_modules = optional_handler_specs(cfg)

    # ── Load Feature Routers ──────────────────────────────────────────────
    startup = initialize_routes(
        required_modules,
        optional_modules,
        reserved=(cfg.api_prefix, "/"),
    )

    app = FastAPI(
        title=cfg.app_name,
        description=(
            "Entry point of the Mayfair hotel-management backend: mounts the "
            "feature routers and serves the single-page frontend."
        ),
        version=cfg.app_version,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.startup = startup

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # BodySize → RequestID → Logging → SecurityHeaders → GZip → CORS → ErrorBoundary
    app.add_middleware(ErrorBoundaryMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=cfg.gzip_minimum_size)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware, trust_proxy=cfg.trust_proxy)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=cfg.max_body_size)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(system.router, prefix=cfg.api_prefix)
    if cfg.enable_debug_endpoint:
        app.include_router(system.debug_router, prefix=cfg.api_prefix)

    # Must stay last: the empty-path mount matches every remaining request
    terminal = TerminalFallback(
        routes_loaded=startup.routes_loaded,
        api_prefix=cfg.api_prefix,
        static_dir=cfg.frontend_build_dir,
        index_file=cfg.spa_index_file,
    )
    app.mount("", MountTableDispatcher(startup.mount_table, terminal), name="features")

    return app


# ── Application Instance ─────────────────────────────────────────────────
setup_logging(default_settings.log_level)
app = create_app()

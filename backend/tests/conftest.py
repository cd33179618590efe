"""
Mayfair Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── frontend_build:   Temporary SPA build (index.html + one asset)
    ├── test_settings:    Settings pointing at that build
    ├── router_factory:   Builds factories returning a fake feature router
    ├── failing_factory:  Builds factories that raise a given message
    ├── hotel_modules:    The nine hotel feature specs, all loading fine
    └── client_for:       HTTPX AsyncClient bound to an app via ASGITransport

Feature routers are test doubles: each answers with its own module name so a
test can tell which handler served a request.
"""

import os

# Override settings for testing BEFORE any mayfair imports
os.environ["LOG_LEVEL"] = "WARNING"
# Never created: tests that serve the frontend pass their own build directory
os.environ["FRONTEND_BUILD_DIR"] = "/nonexistent/mayfair-frontend-build"
os.environ["FEATURE_PACKAGE"] = "mayfair_test_features_absent"
os.environ.pop("CORS_ORIGIN", None)

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

from mayfair.config import Settings
from mayfair.services.registry import HandlerSpec

INDEX_HTML = b"<!doctype html><html><body><div id=\"root\"></div></body></html>"
MAIN_JS = b"console.log('mayfair');"


def build_feature_router(name: str) -> APIRouter:
    """Stand-in for a feature router: echoes its module name."""
    router = APIRouter()

    @router.get("/")
    async def index():
        return {"success": True, "data": {"module": name}}

    @router.get("/login")
    async def login_form():
        return {"success": True, "data": {"module": name, "action": "login"}}

    @router.post("/login")
    async def login():
        return {"success": True, "data": {"module": name, "action": "login"}}

    @router.get("/explode")
    async def explode():
        raise RuntimeError(f"{name} exploded: password=hunter2")

    @router.get("/{item_id}")
    async def detail(item_id: str):
        return {"success": True, "data": {"module": name, "id": item_id}}

    return router


@pytest.fixture
def frontend_build(tmp_path):
    """A built frontend: index.html plus static/js/main.js."""
    build = tmp_path / "build"
    (build / "static" / "js").mkdir(parents=True)
    (build / "index.html").write_bytes(INDEX_HTML)
    (build / "static" / "js" / "main.js").write_bytes(MAIN_JS)
    return build


@pytest.fixture
def test_settings(frontend_build):
    return Settings(
        frontend_build_dir=str(frontend_build),
        log_level="WARNING",
        _env_file=None,
    )


@pytest.fixture
def router_factory():
    """router_factory("rooms") → zero-argument factory returning a fake router."""

    def make(name):
        return lambda: build_feature_router(name)

    return make


@pytest.fixture
def failing_factory():
    """failing_factory("DB unreachable") → factory raising RuntimeError."""

    def make(message):
        def factory():
            raise RuntimeError(message)

        return factory

    return make


@pytest.fixture
def hotel_modules(router_factory):
    """(required, optional) spec lists mirroring the production registry."""
    required = [
        HandlerSpec(name, f"/api/v1/{name}", router_factory(name))
        for name in ("auth", "users", "dashboard", "rooms", "bookings", "restaurant", "upload")
    ]
    optional = [
        HandlerSpec(name, f"/api/v1/{name}", router_factory(name))
        for name in ("reports", "payments")
    ]
    return required, optional


@pytest.fixture
def client_for():
    """
    Provides an async HTTP client factory for endpoint testing.

    Usage:
        async with client_for(app) as client:
            response = await client.get("/health")

    raise_app_exceptions=False lets tests observe the 500 response the
    global handler sends before Starlette re-raises the error.
    """

    def make(app, raise_app_exceptions=True):
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        return AsyncClient(transport=transport, base_url="http://test")

    return make

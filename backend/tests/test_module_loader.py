"""
Mayfair Backend — Module Loader Unit Tests
============================================

What:  Tests for per-module loading, mount table construction and the
       startup orchestration.
How:   Factories are test doubles that succeed or raise on demand; no HTTP.

What we test:
    ✅ Exactly one LoadResult per spec, in declaration order
    ✅ Required failures get a fallback entry, optional failures get none
    ✅ One failing module never blocks the others
    ✅ Orchestration failures leave routes_loaded=False and an empty table
    ✅ Log levels for each kind of failure
"""

import logging

import pytest

from mayfair.exceptions import MountTableError
from mayfair.services.fallback import RouteUnavailableHandler
from mayfair.services.module_loader import (
    Failed,
    Loaded,
    build_mount_table,
    check_mount_paths,
    initialize_routes,
    load_module,
    load_optional_modules,
    load_required_modules,
)
from mayfair.services.registry import HandlerSpec


class TestLoadModule:
    """Tests for the single-spec failure boundary."""

    def test_success_returns_loaded(self, router_factory):
        spec = HandlerSpec("rooms", "/api/v1/rooms", router_factory("rooms"))
        result = load_module(spec)
        assert isinstance(result, Loaded)
        assert result.ok
        assert result.spec is spec

    def test_exception_becomes_failed(self, failing_factory):
        spec = HandlerSpec("bookings", "/api/v1/bookings", failing_factory("DB unreachable"))
        result = load_module(spec)
        assert isinstance(result, Failed)
        assert not result.ok
        assert result.error == "DB unreachable"

    def test_import_error_becomes_failed(self):
        def factory():
            raise ModuleNotFoundError("No module named 'mayfair_features'")

        result = load_module(HandlerSpec("auth", "/api/v1/auth", factory))
        assert isinstance(result, Failed)
        assert "mayfair_features" in result.error

    def test_empty_message_uses_exception_type(self):
        def factory():
            raise KeyError()

        result = load_module(HandlerSpec("users", "/api/v1/users", factory))
        assert result.error == "KeyError"

    def test_non_callable_handler_is_failed(self):
        result = load_module(HandlerSpec("users", "/api/v1/users", lambda: {"not": "an app"}))
        assert isinstance(result, Failed)
        assert "not an ASGI application" in result.error


class TestLoaders:
    """Tests for required and optional loading loops."""

    def test_one_result_per_spec_in_order(self, router_factory, failing_factory):
        specs = [
            HandlerSpec("auth", "/api/v1/auth", router_factory("auth")),
            HandlerSpec("bookings", "/api/v1/bookings", failing_factory("boom")),
            HandlerSpec("rooms", "/api/v1/rooms", router_factory("rooms")),
        ]
        results = load_required_modules(specs)
        assert [r.spec.name for r in results] == ["auth", "bookings", "rooms"]
        assert [r.ok for r in results] == [True, False, True]

    def test_required_failure_logs_warning(self, failing_factory, caplog):
        specs = [HandlerSpec("bookings", "/api/v1/bookings", failing_factory("DB unreachable"))]
        with caplog.at_level(logging.INFO, logger="mayfair.services.module_loader"):
            load_required_modules(specs)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "bookings" in warnings[0].getMessage()
        assert "DB unreachable" in warnings[0].getMessage()

    def test_optional_failure_logs_info_only(self, failing_factory, caplog):
        specs = [HandlerSpec("reports", "/api/v1/reports", failing_factory("no reports"))]
        with caplog.at_level(logging.INFO, logger="mayfair.services.module_loader"):
            results = load_optional_modules(specs)
        assert not results[0].ok
        assert all(r.levelno == logging.INFO for r in caplog.records)
        assert any("reports routes not available" in r.getMessage() for r in caplog.records)


class TestBuildMountTable:
    """Tests for turning LoadResults into mount entries."""

    def test_required_failure_mounts_fallback(self, router_factory, failing_factory):
        required = load_required_modules([
            HandlerSpec("auth", "/api/v1/auth", router_factory("auth")),
            HandlerSpec("bookings", "/api/v1/bookings", failing_factory("DB unreachable")),
        ])
        table = build_mount_table(required)

        assert table.paths == ("/api/v1/auth", "/api/v1/bookings")
        bookings = table.get("/api/v1/bookings")
        assert bookings.fallback
        assert isinstance(bookings.handler, RouteUnavailableHandler)
        assert bookings.handler.details == "DB unreachable"
        assert not table.get("/api/v1/auth").fallback

    def test_optional_failure_is_not_mounted(self, router_factory, failing_factory):
        optional = load_optional_modules([
            HandlerSpec("reports", "/api/v1/reports", failing_factory("missing")),
            HandlerSpec("payments", "/api/v1/payments", router_factory("payments")),
        ])
        table = build_mount_table([], optional)
        assert table.paths == ("/api/v1/payments",)
        assert table.get("/api/v1/reports") is None

    def test_required_entries_precede_optional(self, hotel_modules):
        required, optional = hotel_modules
        table = build_mount_table(load_required_modules(required), load_optional_modules(optional))
        assert table.paths == tuple(spec.mount_path for spec in required + optional)

    def test_successful_entry_serves_factory_handler(self):
        async def sentinel_app(scope, receive, send):
            pass

        results = load_required_modules([HandlerSpec("auth", "/api/v1/auth", lambda: sentinel_app)])
        table = build_mount_table(results)
        assert table.get("/api/v1/auth").handler is sentinel_app


class TestCheckMountPaths:
    """Tests for mount path validation."""

    def test_duplicate_path_rejected(self, router_factory):
        specs = [
            HandlerSpec("rooms", "/api/v1/rooms", router_factory("rooms")),
            HandlerSpec("suites", "/api/v1/rooms", router_factory("suites")),
        ]
        with pytest.raises(MountTableError, match="both rooms and suites"):
            check_mount_paths(specs)

    def test_reserved_path_rejected(self, router_factory):
        specs = [HandlerSpec("api", "/api", router_factory("api"))]
        with pytest.raises(MountTableError, match="reserved"):
            check_mount_paths(specs, reserved=("/api", "/"))

    @pytest.mark.parametrize("path", ["api/v1/rooms", "/api/v1/rooms/", "/api//rooms", "/"])
    def test_malformed_path_rejected(self, router_factory, path):
        with pytest.raises(MountTableError, match="Invalid mount path"):
            check_mount_paths([HandlerSpec("rooms", path, router_factory("rooms"))])


class TestInitializeRoutes:
    """Tests for the whole startup orchestration."""

    def test_isolation_one_failure_others_load(self, hotel_modules, failing_factory):
        required, optional = hotel_modules
        required[4] = HandlerSpec("bookings", "/api/v1/bookings", failing_factory("DB unreachable"))

        state = initialize_routes(required, optional)

        assert state.routes_loaded
        assert len(state.results) == 9
        assert [f.spec.name for f in state.failed] == ["bookings"]
        for entry in state.mount_table:
            assert entry.fallback == (entry.name == "bookings")
        assert len(state.mount_table) == 9

    def test_all_required_failing_still_loads(self, failing_factory):
        required = [
            HandlerSpec(name, f"/api/v1/{name}", failing_factory(f"{name} down"))
            for name in ("auth", "rooms")
        ]
        state = initialize_routes(required)
        assert state.routes_loaded
        assert all(entry.fallback for entry in state.mount_table)

    def test_duplicate_paths_fail_orchestration(self, router_factory, caplog):
        required = [
            HandlerSpec("rooms", "/api/v1/rooms", router_factory("rooms")),
            HandlerSpec("rooms-v2", "/api/v1/rooms", router_factory("rooms")),
        ]
        with caplog.at_level(logging.ERROR, logger="mayfair.services.module_loader"):
            state = initialize_routes(required)

        assert not state.routes_loaded
        assert len(state.mount_table) == 0
        assert state.results == ()
        assert any("Critical error loading routes" in r.getMessage() for r in caplog.records)

    def test_broken_spec_source_fails_orchestration(self):
        def specs():
            yield HandlerSpec("auth", "/api/v1/auth", lambda: None)
            raise RuntimeError("registry unreadable")

        state = initialize_routes(specs())
        assert not state.routes_loaded
        assert len(state.mount_table) == 0

    def test_optional_path_clashing_with_required_fails(self, router_factory):
        required = [HandlerSpec("reports", "/api/v1/reports", router_factory("reports"))]
        optional = [HandlerSpec("reports", "/api/v1/reports", router_factory("reports"))]
        assert not initialize_routes(required, optional).routes_loaded

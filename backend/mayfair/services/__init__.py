# Services package init
"""
Mayfair Backend — Startup & Dispatch Services
===============================================

What:  Everything between the declared feature routers and the HTTP surface.

Service Inventory:
    - registry:      HandlerSpec list (what to mount, where, how to build it)
    - module_loader: Per-module isolated loading → LoadResults → MountTable
    - fallback:      503 ROUTE_UNAVAILABLE stand-in for failed required modules
    - mount_table:   Immutable ordered (path, handler) pairs + prefix matching
    - dispatcher:    First-match-wins walk over the mount table
    - terminal:      API 404/503, static assets, SPA document

Startup flow:
    registry → module_loader.initialize_routes() → StartupState
            → MountTableDispatcher(mount_table, TerminalFallback(routes_loaded))
"""

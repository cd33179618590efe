"""
Mayfair Backend — Application Package Initializer
=================================================

What: The HTTP entry point of the Mayfair hotel-management backend.
Who:  Imported by uvicorn (`uvicorn mayfair.main:app`) and by pytest.

Architecture Note:
    This package does not implement bookings, payments or users itself.
    It mounts the feature routers that do, and keeps the server serving
    when one of them cannot be loaded:

    ┌─────────────────────────────────────┐
    │     Middleware (size, id, logs)     │  ← cross-cutting concerns
    ├─────────────────────────────────────┤
    │   Fixed routes (/health, /api/test) │  ← always available
    ├─────────────────────────────────────┤
    │   Mount table (feature routers or   │  ← built once at startup
    │   503 fallbacks, in declared order) │
    ├─────────────────────────────────────┤
    │   Terminal fallback (API 404/503,   │  ← everything unmatched
    │   static assets, SPA document)      │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"

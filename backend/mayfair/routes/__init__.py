# Routes package init
"""
Mayfair Backend — Fixed Routes
================================

What:  The few endpoints the entry point serves itself. They do not depend
       on any feature router, so they keep answering when startup failed.

Route Inventory:
    - health.py:  GET /health      (liveness probe for the hosting platform)
    - system.py:  GET /api/test    (API smoke test)
                  GET /api/debug   (env var presence, opt-in)

Feature routes (auth, rooms, bookings, ...) are not here; they are mounted
from the feature package by services.module_loader.
"""

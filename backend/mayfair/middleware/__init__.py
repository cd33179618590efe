# Middleware package init
"""
Mayfair Backend — Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Body Size] → [Request ID] → [Logging] → [Security Headers]
            → [GZip] → [CORS] → Route Handler

    1. Body size FIRST: oversized uploads are refused before anything reads them
    2. Request ID: correlation ID for the access log and error logs
    3. Logging: one access line per request, with the request ID
    4. Security headers: added to every response, errors included
    5. GZip / CORS: FastAPI built-ins

    The order is reversed for responses.
"""

# Middleware package init
"""
Pokédex API: Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: assigns the correlation id every later log line carries
    2. Logging:    one access line per request with status and duration
    3. GZip / CORS: Starlette's stock middleware, configured in main.py
"""

# Middleware package init
"""
NoteKeeper Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → [Unhandled Error] → Route Handler

    Why this order:
    1. Request ID first: every later log line can carry the correlation ID
    2. Logging: wraps everything below it, preflights included
    3. CORS: answers OPTIONS with 204 before routing or authentication,
       and stamps CORS headers on every routed response
    4. Unhandled Error: converts unexpected exceptions to the generic 500
       inside the other three, so it still gets headers and a log line
"""

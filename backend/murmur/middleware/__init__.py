# Middleware package init
"""
Murmur Backend — Middleware Package
=====================================

Cross-cutting concerns applied to every request.

Execution order:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

Rate limiting runs before the request id is assigned, so a 429 carries
whatever id the client sent (or none).
"""

# Middleware package init
"""
Storefront Backend: Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the logging middleware can tag every access log
    line with the correlation ID.
"""

# Middleware package init
"""
Contact API — Middleware Package
==================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Logging: one access line per request with status and duration
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""

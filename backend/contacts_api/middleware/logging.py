"""
Contact API — Request Logging Middleware
==========================================

What:  One access log line per HTTP request.
Why:   Status codes and durations are the first thing to look at when
       something goes wrong.
How:   Times the downstream call and logs method, path, status, duration,
       request ID and client IP on the `contacts_api.access` logger.

Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
A request whose handler raised is logged as a 500 before the error moves on
to the catch-all handler. Request bodies are never logged (they carry
personal data).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from contacts_api.middleware.request_id import request_id_var

logger = logging.getLogger("contacts_api.access")

# Polled by health checkers; logging them buries real traffic
SKIPPED_PATHS = frozenset({"/ping"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its outcome and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
        finally:
            self._log(request, status, (time.perf_counter() - start_time) * 1000)
        return response

    @staticmethod
    def _log(request: Request, status: int, duration_ms: float) -> None:
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

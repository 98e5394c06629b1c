"""
NoteKeeper Backend — Request Logging Middleware
=================================================

What:  One access log line per HTTP request.
Why:   Method, path, status and duration are the minimum needed to debug
       and monitor the service.
How:   Measures from middleware entry to response return and logs on the
       `notekeeper.access` logger. Wraps the CORS layer and the router, so
       preflight requests are logged too.

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, client IP, request ID
    ❌ Don't log: request bodies (note content), Authorization header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notekeeper.middleware.request_id import request_id_var

logger = logging.getLogger("notekeeper.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status code and duration for each request.

    Level by status class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
    Logging never alters the response. An exception escaping the layers
    below is logged as a 500 and re-raised.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        try:
            response = await call_next(request)
        except Exception:
            self._log(method, path, 500, start_time, rid, client_ip)
            raise

        self._log(method, path, response.status_code, start_time, rid, client_ip)
        return response

    @staticmethod
    def _log(method: str, path: str, status: int, start_time: float, rid: str, client_ip: str) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

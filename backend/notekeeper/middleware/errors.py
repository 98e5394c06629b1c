"""
NoteKeeper Backend — Unhandled Error Middleware
=================================================

What:  Turns any exception that escaped the route handlers and the typed
       exception handlers into the generic 500 error body.
Why:   FastAPI runs its catch-all `Exception` handler in the outermost
       server-error layer, outside the request ID, logging and CORS
       middleware. Converting here keeps those headers and the access log
       line on unexpected failures too.
When:  Innermost middleware, directly around the router.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from notekeeper.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Log the stack trace, answer 500 with no internal detail."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            rid = request_id_var.get("")
            logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "server_error", "message": "internal error", "request_id": rid},
            )

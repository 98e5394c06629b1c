"""
NoteKeeper Backend — Permissive CORS Middleware
=================================================

What:  Adds fixed, permissive CORS headers to every response and answers
       every OPTIONS request with 204 before it reaches the router.
Why:   The API is consumed by browser front-ends on arbitrary origins. The
       credential is a bearer token, not a cookie, so `*` is acceptable.

Why not Starlette's CORSMiddleware:
    It only treats OPTIONS as a preflight when Origin and
    Access-Control-Request-Method are present (anything else falls through
    to routing and authentication), answers preflights with 200, and omits
    CORS headers on requests without an Origin. This API promises 204 for
    any OPTIONS and the same headers on every response.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Authorization", "Content-Type")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
    "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
}


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    """Allow all origins; short-circuit OPTIONS with 204 No Content."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

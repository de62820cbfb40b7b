# ─────────────────────────────────────────────────────────────────────────────
# Cross-Origin Middleware — fixed permissive headers + preflight short-circuit
# ─────────────────────────────────────────────────────────────────────────────
# Every response carries the same CORS headers, whatever the request origin.
#
# Starlette's CORSMiddleware is not used here: it echoes the request origin
# when credentials are allowed, rejects unknown preflight headers with 400
# and only decorates responses to requests that send an Origin header.
# Browser clients of this relay expect the literal header set below.
#
# OPTIONS is answered here with 200 and an empty body before routing,
# validation or the credential check run.
# ─────────────────────────────────────────────────────────────────────────────


import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

CORS_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Credentials", "true"),
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET,OPTIONS,PATCH,DELETE,POST,PUT"),
    (
        "Access-Control-Allow-Headers",
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, "
        "Content-Length, Content-MD5, Content-Type, Date, X-Api-Version",
    ),
)


def apply_cors_headers(response: Response) -> Response:
    """Set the fixed CORS header set on ``response`` in place."""
    for name, value in CORS_HEADERS:
        response.headers[name] = value
    return response


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    """Answer preflight requests and stamp CORS headers on every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            logger.debug("preflight", path=request.url.path)
            return apply_cors_headers(Response(status_code=200))

        response = await call_next(request)
        return apply_cors_headers(response)

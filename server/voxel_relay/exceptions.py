# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions + FastAPI Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────
# Every failure a caller can see is a 500 with a single {"error": ...} body.
# ─────────────────────────────────────────────────────────────────────────────


import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from voxel_relay.cors import CORS_HEADERS

logger = structlog.get_logger(__name__)


# ── Exception hierarchy ──────────────────────────────────────────────────────


class RelayError(Exception):
    """Base exception for all relay errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(RelayError):
    """Raised when the backend credential is missing. Never retried."""

    def __init__(self, message: str = "Server is missing API Key."):
        super().__init__(message, status_code=500)


class BackendError(RelayError):
    """A single candidate model failed. The fallback loop moves on."""

    def __init__(self, message: str, model: str | None = None):
        self.model = model
        super().__init__(message, status_code=500)


class BackendCallError(BackendError):
    """Outbound call returned a non-success status or never completed."""


class BackendContentError(BackendError):
    """Outbound call succeeded but carried no candidate content."""

    def __init__(self, model: str | None = None):
        super().__init__("Empty response from AI", model=model)


class VoxelParseError(BackendError):
    """Model text did not yield a JSON array after cleanup."""


class AllModelsFailedError(RelayError):
    """Raised when every candidate model failed."""

    def __init__(self, last_error: str, attempted: int):
        self.last_error = last_error
        self.attempted = attempted
        super().__init__(f"All models failed. Last error: {last_error}", status_code=500)


# ── Handler registration ────────────────────────────────────────────────────


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app.

    Endpoints raise RelayError subclasses; these handlers catch them
    and return structured JSON — no inline try/except in endpoints.
    """

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        logger.error("relay_error", error=exc.message, error_type=type(exc).__name__)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        logger.warning("invalid_request_body", details=details)
        return JSONResponse(
            status_code=500,
            content={"error": f"Invalid request body: {details}"},
        )

    # Runs in ServerErrorMiddleware, outside the CORS middleware, so the
    # headers are attached here.
    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
            headers=dict(CORS_HEADERS),
        )

# ─────────────────────────────────────────────────────────────────────────────
# FastAPI Application Factory + Lifespan
# ─────────────────────────────────────────────────────────────────────────────
# Entrypoint: uvicorn voxel_relay.main:create_app --factory --host 0.0.0.0 --port 8080
# The --factory flag tells uvicorn to call create_app() for the app instance.
# ─────────────────────────────────────────────────────────────────────────────

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from voxel_relay.config import Settings, get_settings
from voxel_relay.cors import PermissiveCORSMiddleware
from voxel_relay.exceptions import register_exception_handlers
from voxel_relay.logging_config import configure_logging
from voxel_relay.middleware import RequestContextMiddleware
from voxel_relay.routes import generate, health
from voxel_relay.services.gemini import GeminiClient
from voxel_relay.services.relay import PromptRelay

logger = structlog.get_logger(__name__)


def _configure_otel(exporter_type: str) -> None:
    """Configure OpenTelemetry tracing.

    Supports "console" for dev and "gcp" for Cloud Trace.
    No-op if the exporter type is unknown.
    """
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    provider = TracerProvider()

    if exporter_type == "console":
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    elif exporter_type == "gcp":
        try:
            from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter
        except ImportError:
            logger.warning("gcp_trace_exporter_not_available")
            return
        provider.add_span_processor(BatchSpanProcessor(CloudTraceSpanExporter()))
    else:
        logger.warning("unknown_otel_exporter", exporter=exporter_type)
        return

    from opentelemetry import trace

    trace.set_tracer_provider(provider)
    logger.info("otel_configured", exporter=exporter_type)


def build_relay(settings: Settings) -> PromptRelay:
    """Create the Gemini client and relay from settings.

    The API key is read once here and injected; nothing downstream
    touches process environment.
    """
    client = GeminiClient(
        api_key=settings.gemini_api_key.get_secret_value(),
        base_url=settings.gemini_base_url,
        temperature=settings.temperature,
        max_output_tokens=settings.max_output_tokens,
        timeout=settings.backend_timeout_seconds,
    )
    return PromptRelay.from_settings(settings, client)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown lifecycle.

    The relay (and its pooled HTTP client) is created here and stored in
    app.state for injection via Depends(). A missing API key does not stop
    startup; /health/ready reports it and /api/generate answers 500.
    """
    settings = get_settings()

    otel_exporter = os.environ.get("OTEL_EXPORTER", "")
    if otel_exporter:
        _configure_otel(otel_exporter)

    relay = build_relay(settings)
    app.state.settings = settings
    app.state.prompt_relay = relay

    if relay.is_configured:
        logger.info("relay_ready", relay_mode=settings.relay_mode, models=list(relay.models))
    else:
        logger.warning("relay_unconfigured", reason="GEMINI_API_KEY env var not set")

    yield  # App is running, serving requests

    # Shutdown
    await relay.aclose()


def create_app() -> FastAPI:
    """Application factory. Invoked by: uvicorn voxel_relay.main:create_app --factory

    The --factory flag tells uvicorn to call this function to get the app,
    rather than importing a module-level variable. This avoids side effects
    at import time and makes testing cleaner.
    """
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Voxel Relay",
        description="Prompt-to-voxel relay for the Gemini generateContent API",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ── Middleware stack ─────────────────────────────────────────────────────
    # Starlette applies middleware in reverse order of add_middleware calls.
    # The execution order for an incoming request is:
    #   CORS → RequestContext → route handler
    #
    # CORS answers OPTIONS before anything else runs and stamps its headers
    # on every response the inner layers produce.

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(PermissiveCORSMiddleware)

    # ── Exception handlers ───────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Routes ───────────────────────────────────────────────────────────────
    app.include_router(health.router, tags=["health"])
    app.include_router(generate.router, tags=["generate"])

    return app

# ─────────────────────────────────────────────────────────────────────────────
# Prompt Relay — core generation business logic
# ─────────────────────────────────────────────────────────────────────────────
# Endpoints delegate here. This owns:
#   - Credential check
#   - Prompt templating
#   - Ordered model fallback (or single-model mode)
#   - Text cleanup + JSON array extraction
# ─────────────────────────────────────────────────────────────────────────────


import time
from typing import Any

import structlog
from opentelemetry import trace

from voxel_relay.config import Settings
from voxel_relay.exceptions import AllModelsFailedError, BackendError, ConfigurationError
from voxel_relay.pipeline.extraction import extract_voxel_array
from voxel_relay.pipeline.prompt_templates import build_voxel_prompt
from voxel_relay.services.gemini import GeminiClient

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class PromptRelay:
    """Forward a prompt to Gemini and return the parsed voxel array.

    Candidates are tried strictly in order, one outbound call at a time.
    With ``fallback=False`` exactly one candidate is expected and its
    failure is surfaced as-is.
    """

    def __init__(
        self,
        client: GeminiClient,
        models: tuple[str, ...] | list[str],
        fallback: bool = True,
        validate_voxels: bool = False,
    ) -> None:
        if not models:
            raise ValueError("PromptRelay needs at least one model id")
        if not fallback and len(models) != 1:
            raise ValueError("Single-model mode takes exactly one model id")
        self._client = client
        self._models = tuple(models)
        self._fallback = fallback
        self._validate_voxels = validate_voxels

    @classmethod
    def from_settings(cls, settings: Settings, client: GeminiClient) -> "PromptRelay":
        return cls(
            client,
            settings.candidate_models,
            fallback=settings.relay_mode == "fallback",
            validate_voxels=settings.validate_voxels,
        )

    @property
    def models(self) -> tuple[str, ...]:
        return self._models

    @property
    def is_configured(self) -> bool:
        """Whether a backend credential was supplied."""
        return self._client.has_api_key

    def ensure_configured(self) -> None:
        if not self.is_configured:
            logger.error("missing_api_key")
            raise ConfigurationError()

    async def generate(self, prompt: str) -> list[Any]:
        """Full relay: credential check → template → candidates → parsed array."""
        self.ensure_configured()
        with tracer.start_as_current_span("relay.generate") as span:
            span.set_attribute("relay.fallback", self._fallback)
            span.set_attribute("relay.candidates", len(self._models))
            templated = build_voxel_prompt(prompt)
            if self._fallback:
                return await self._generate_with_fallback(templated)
            return await self._attempt(self._models[0], templated)

    async def aclose(self) -> None:
        """Release the pooled HTTP client. Called from lifespan shutdown."""
        await self._client.aclose()

    async def _generate_with_fallback(self, templated: str) -> list[Any]:
        last_error = ""
        for model in self._models:
            try:
                return await self._attempt(model, templated)
            except BackendError as e:
                # Logged in _attempt; only the last message reaches the caller.
                last_error = e.message

        logger.error(
            "all_models_failed",
            attempted=len(self._models),
            last_error=last_error,
        )
        raise AllModelsFailedError(last_error, attempted=len(self._models))

    async def _attempt(self, model: str, templated: str) -> list[Any]:
        """One candidate: outbound call + extraction. Raises BackendError."""
        with tracer.start_as_current_span("relay.attempt") as span:
            span.set_attribute("model", model)
            logger.info("model_attempt", model=model)
            t0 = time.perf_counter()
            try:
                text = await self._client.generate_text(model, templated)
                voxels = extract_voxel_array(text, validate=self._validate_voxels)
            except BackendError as e:
                e.model = model
                span.set_attribute("outcome", type(e).__name__)
                logger.warning(
                    "model_failed",
                    model=model,
                    error=e.message,
                    error_type=type(e).__name__,
                )
                raise

            span.set_attribute("outcome", "ok")
            logger.info(
                "model_succeeded",
                model=model,
                voxels=len(voxels),
                time_ms=int((time.perf_counter() - t0) * 1000),
            )
            return voxels

# ─────────────────────────────────────────────────────────────────────────────
# Gemini Client — async REST client for generateContent
# ─────────────────────────────────────────────────────────────────────────────
# One httpx.AsyncClient is shared across requests (created in lifespan,
# closed on shutdown). The client is stateless per call: model id and
# prompt travel as arguments, the API key is fixed at construction.
# ─────────────────────────────────────────────────────────────────────────────


from typing import Any

import httpx
import structlog

from voxel_relay.exceptions import BackendCallError, BackendContentError

logger = structlog.get_logger(__name__)


class GeminiClient:
    """Issue one generateContent call per ``generate_text`` invocation.

    Raises BackendCallError for non-2xx statuses and transport failures,
    BackendContentError when a 2xx reply has no candidate text.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        temperature: float = 0.4,
        max_output_tokens: int = 10000,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._generation_config = {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
        }
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    def endpoint(self, model: str) -> str:
        """URL of the generateContent method for ``model`` (key not included)."""
        return f"{self._base_url}/{model}:generateContent"

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": dict(self._generation_config),
        }

    async def generate_text(self, model: str, prompt: str) -> str:
        """Return the first candidate's text for ``prompt`` on ``model``."""
        try:
            response = await self._http.post(
                self.endpoint(model),
                params={"key": self._api_key},
                json=self.build_payload(prompt),
            )
        except httpx.HTTPError as e:
            raise BackendCallError(str(e) or type(e).__name__, model=model) from e

        if not response.is_success:
            raise BackendCallError(_error_message(response), model=model)

        try:
            data = response.json()
        except ValueError as e:
            raise BackendCallError(f"Invalid JSON from backend: {e}", model=model) from e

        text = _first_candidate_text(data)
        if text is None:
            raise BackendContentError(model=model)
        return text

    async def aclose(self) -> None:
        await self._http.aclose()


def _error_message(response: httpx.Response) -> str:
    """Backend's ``error.message`` if present, else the HTTP reason phrase."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


def _first_candidate_text(data: Any) -> str | None:
    """Dig out candidates[0].content.parts[0].text, or None if any hop is missing."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None

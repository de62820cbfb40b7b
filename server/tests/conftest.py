# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures — shared across all tests
# ─────────────────────────────────────────────────────────────────────────────
# The Gemini backend is an httpx.MockTransport; no network is touched.
# ─────────────────────────────────────────────────────────────────────────────


import json
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from voxel_relay.config import Settings
from voxel_relay.main import create_app
from voxel_relay.services.gemini import GeminiClient
from voxel_relay.services.relay import PromptRelay

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
TEST_API_KEY = "test-key"


def gemini_reply(text: str) -> httpx.Response:
    """A 200 generateContent reply whose first candidate carries ``text``."""
    return httpx.Response(
        200,
        json={"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]},
    )


def gemini_error(status_code: int, message: str) -> httpx.Response:
    """A failed generateContent reply in Google's error envelope."""
    return httpx.Response(
        status_code,
        json={"error": {"code": status_code, "message": message, "status": "NOT_FOUND"}},
    )


class FakeGemini:
    """MockTransport handler that replies per model id and records calls.

    Unknown models answer 404, like the real API does for retired ids.
    """

    def __init__(self, replies: dict[str, httpx.Response | Exception] | None = None) -> None:
        self.replies = replies or {}
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        model = request.url.path.rsplit("/", 1)[-1].split(":", 1)[0]
        self.calls.append(model)
        self.requests.append(request)
        reply = self.replies.get(model)
        if reply is None:
            return gemini_error(404, f"models/{model} is not found")
        if isinstance(reply, Exception):
            raise reply
        return reply

    def body(self, index: int = 0) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing — fixed key, console logs."""
    return Settings(
        gemini_api_key=TEST_API_KEY,
        gemini_base_url=BASE_URL,
        gemini_models="model-a, model-b,model-c",
        log_json=False,
        log_level="DEBUG",
    )


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def make_client(fake_gemini: FakeGemini) -> Callable[..., GeminiClient]:
    """Factory for GeminiClient instances routed to ``fake_gemini``."""

    def _make(api_key: str = TEST_API_KEY) -> GeminiClient:
        return GeminiClient(
            api_key=api_key,
            base_url=BASE_URL,
            transport=httpx.MockTransport(fake_gemini),
        )

    return _make


@pytest.fixture
def relay(test_settings: Settings, make_client: Callable[..., GeminiClient]) -> PromptRelay:
    return PromptRelay.from_settings(test_settings, make_client())


@pytest.fixture
def make_app_client(test_settings: Settings) -> Callable[..., TestClient]:
    """Build a TestClient around ``relay`` (lifespan does not run)."""

    def _make(relay: PromptRelay, **kwargs: Any) -> TestClient:
        app = create_app()
        app.state.prompt_relay = relay
        app.state.settings = test_settings
        return TestClient(app, **kwargs)

    return _make


@pytest.fixture
def client(relay: PromptRelay, make_app_client: Callable[..., TestClient]) -> TestClient:
    """FastAPI TestClient with a configured relay."""
    return make_app_client(relay)

# ─────────────────────────────────────────────────────────────────────────────
# Dependency Injection — FastAPI Depends() providers
# ─────────────────────────────────────────────────────────────────────────────
# State flows: lifespan creates → app.state stores → Depends() injects.
# No global variables. Every dependency is explicit in endpoint signatures.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import Request

from voxel_relay.config import Settings
from voxel_relay.services.relay import PromptRelay


def get_prompt_relay(request: Request) -> PromptRelay:
    """Inject PromptRelay into endpoints via Depends()."""
    return request.app.state.prompt_relay


def get_configured_relay(request: Request) -> PromptRelay:
    """Inject PromptRelay, failing with ConfigurationError if it has no key.

    Sub-dependencies resolve before the request body is validated, so a
    missing key yields the same 500 whatever the caller sent.
    """
    relay = get_prompt_relay(request)
    relay.ensure_configured()
    return relay


def get_settings_dep(request: Request) -> Settings:
    """Inject Settings into endpoints via Depends()."""
    return request.app.state.settings

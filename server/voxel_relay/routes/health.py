# ─────────────────────────────────────────────────────────────────────────────
# Health Check Routes — liveness and readiness
# ─────────────────────────────────────────────────────────────────────────────
#   /health        → Liveness probe. "Is the process alive?" Near-zero cost.
#   /health/ready  → Readiness probe. "Can it serve traffic?"
#                    503 when no backend API key is configured.
# Neither probe calls the backend.
# ─────────────────────────────────────────────────────────────────────────────

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from voxel_relay.config import Settings
from voxel_relay.dependencies import get_prompt_relay, get_settings_dep
from voxel_relay.schemas import LivenessResponse, ReadinessResponse
from voxel_relay.services.relay import PromptRelay

router = APIRouter()


@router.get("/health", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe — is the process alive?"""
    return LivenessResponse(status="ok")


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(
    relay: PromptRelay = Depends(get_prompt_relay),
    settings: Settings = Depends(get_settings_dep),
) -> JSONResponse:
    """Readiness probe — can this instance serve generation requests?"""
    ready = relay.is_configured

    response = ReadinessResponse(
        status="ready" if ready else "not_ready",
        api_key_configured=ready,
        relay_mode=settings.relay_mode,
        models=list(relay.models),
    )

    return JSONResponse(
        status_code=200 if ready else 503,
        content=response.model_dump(),
    )

# ─────────────────────────────────────────────────────────────────────────────
# POST /api/generate — voxel generation endpoint (THIN)
# ─────────────────────────────────────────────────────────────────────────────


from typing import Any

from fastapi import APIRouter, Depends

from voxel_relay.dependencies import get_configured_relay
from voxel_relay.schemas import ErrorResponse, GenerationRequest
from voxel_relay.services.relay import PromptRelay

router = APIRouter()


@router.post(
    "/api/generate",
    response_model=list[Any],
    responses={500: {"model": ErrorResponse}},
)
async def generate(
    body: GenerationRequest,
    relay: PromptRelay = Depends(get_configured_relay),
) -> list[Any]:
    """Generate a voxel array for a free-text prompt.

    Errors are exceptions. Logic is in the relay. This endpoint is just wiring.
    """
    return await relay.generate(body.prompt)

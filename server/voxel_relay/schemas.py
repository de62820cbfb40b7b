# ─────────────────────────────────────────────────────────────────────────────
# Request / Response Schemas — Pydantic v2
# ─────────────────────────────────────────────────────────────────────────────


from pydantic import BaseModel


class GenerationRequest(BaseModel):
    """Inbound body for POST /api/generate."""

    prompt: str


class VoxelDescriptor(BaseModel):
    """One voxel as the model is asked to emit it.

    Only enforced when ``validate_voxels`` is enabled; otherwise the
    parsed array is returned to the caller untouched.
    """

    x: int
    y: int
    z: int
    c: str


class ErrorResponse(BaseModel):
    """Body of every failure response."""

    error: str


class LivenessResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    api_key_configured: bool
    relay_mode: str
    models: list[str]

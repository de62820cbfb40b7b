# ─────────────────────────────────────────────────────────────────────────────
# Settings — Pydantic v2 BaseSettings
# ─────────────────────────────────────────────────────────────────────────────


from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_MODELS = ",".join(
    [
        "gemini-1.5-flash-latest",
        "gemini-1.5-flash",
        "gemini-1.5-flash-001",
        "gemini-1.5-pro",
        "gemini-pro",
    ]
)


class Settings(BaseSettings):
    """Server configuration sourced from environment variables.

    Uses pydantic-settings v2 (separate package from pydantic).
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env")

    # ── Backend credential ───────────────────────────────────────────────────
    # Empty means "not configured": every /api/generate call fails with 500.
    gemini_api_key: SecretStr = SecretStr("")

    # ── Backend ──────────────────────────────────────────────────────────────
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_models: str = DEFAULT_GEMINI_MODELS  # comma-separated, tried in order
    relay_mode: Literal["fallback", "single"] = "fallback"
    single_model: str = "gemini-1.5-flash"
    temperature: float = 0.4
    max_output_tokens: int = 10000
    backend_timeout_seconds: float | None = None  # None = wait indefinitely

    # ── Output ───────────────────────────────────────────────────────────────
    validate_voxels: bool = False

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True  # JSON logs for Cloud Logging

    @property
    def candidate_models(self) -> tuple[str, ...]:
        """Model ids to try, in order, for the configured relay mode."""
        if self.relay_mode == "single":
            return (self.single_model,)
        return parse_model_list(self.gemini_models)


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


def parse_model_list(models: str) -> tuple[str, ...]:
    """Parse a comma-separated model string into an ordered tuple.

    Strips whitespace from each id and skips empty entries.
    """
    return tuple(model.strip() for model in models.split(",") if model.strip())

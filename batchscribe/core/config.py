"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """BatchScribe settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        api_key: Credential sent to the transcription API (may be pre-populated).
        base_url: Root URL of the OpenAI-compatible transcription proxy.
        auth_scheme: "bearer" for ``Authorization: Bearer``, "api_key" for a custom header.
        strict_format_check: Also filter files admitted through the plain file picker.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Transcription API ---
    api_key: str = ""
    base_url: str = "https://litellm.plat-eng.prod.cloud.siriusxm.com"
    default_model: str = "whisper-1"

    # Header scheme used to carry the credential
    auth_scheme: Literal["bearer", "api_key"] = "bearer"
    api_key_header: str = "x-api-key"  # Used when auth_scheme="api_key" and for model discovery

    # None = no timeout; the caller's environment decides
    request_timeout: float | None = None

    # --- Batch pipeline ---
    strict_format_check: bool = False  # Filter picker uploads like drop/folder admissions
    # Progress shown once a file starts processing; never 0 so work is visible
    initial_progress: int = Field(10, ge=1, le=100)

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 8000
    log_level: str = "INFO"  # Python logging level

    # --- Streamlit UI ---
    ui_api_base_url: str = "http://localhost:8000"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()

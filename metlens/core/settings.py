"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- The provider API key lives here and only here; nothing outside the server reads it.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # CORS: empty = same-origin only (no middleware). Set for a dev front end on another port.
    cors_allow_origins: list[str] = Field(
        default=[],
        description="Cross-origin browser apps allowed to POST to the gateway"
    )

    log_level: str = Field(default="INFO", description="Root log level for the gateway process")

    # Provider credentials. Env: API_KEY
    api_key: Optional[str] = None

    # ---- Gemini provider ----
    provider_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    provider_timeout_s: float = Field(default=60.0, description="Per-call timeout for provider requests")
    analysis_model: str = Field(default="gemini-2.5-flash", description="Multimodal model for object detection")
    tts_model: str = Field(default="gemini-2.5-flash-preview-tts", description="Speech synthesis model")
    tts_voice: str = Field(default="Kore", description="Prebuilt voice name for pronunciations")

    # ---- Response sizing knobs ----
    max_objects: int = Field(default=5, ge=1, description="Cap on detected objects per image")

    # ---- Client side ----
    gateway_base_url: str = Field(default="http://localhost:8000", description="Where the gateway is served")
    gateway_path: str = Field(default="/api/analyze")
    gateway_timeout_s: Optional[float] = Field(default=None, description="None = wait for the gateway")
    jpeg_quality: int = Field(default=80, ge=1, le=95)

settings = Settings()

def get_settings() -> Settings:
    """
    FastAPI dependency; tests override it through app.dependency_overrides.
    """
    return settings

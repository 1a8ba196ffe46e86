"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. All secrets are injected via environment; never
hard-coded.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins. "*" lets any dashboard host call us.
    cors_origins_str: str = "*"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── AI ────────────────────────────────────────────────────────
    # When True, all model calls return canned mock responses.
    # Always True in tests; set False in production with a real key.
    ai_mock_mode: bool = True

    # "gateway" → OpenAI-compatible chat-completions endpoint over HTTP
    # "gemini"  → Google Generative AI SDK, called directly
    ai_provider: str = "gateway"
    ai_model: str = "google/gemini-2.5-flash"
    ai_timeout_seconds: float = 60.0

    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    ai_gateway_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("AI_GATEWAY_API_KEY", "LOVABLE_API_KEY"),
    )

    # Get from https://aistudio.google.com/
    gemini_api_key: str = ""

    # ─── Limits ────────────────────────────────────────────────────
    # Base64 characters, not bytes (~11 MB original file).
    max_media_b64_chars: int = 15_000_000
    analyze_rate_limit: str = "20/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
        populate_by_name=True,
    )


# Module-level singleton; import this everywhere instead of instantiating Settings()
settings = Settings()

"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # ==========================================================================
    # Translator backend
    # ==========================================================================

    # Which backend to use: "libretranslate" or "llm"
    translator_backend: str = "libretranslate"

    libretranslate_url: str = "http://localhost:5000"
    libretranslate_api_key: str = ""

    # Seconds
    request_timeout: float = 30.0
    health_check_timeout: float = 5.0

    # Used when auto-detection fails
    detection_fallback_language: str = "en"

    # LLM backend (accepts either GOOGLE_API_KEY or GEMINI_API_KEY)
    llm_provider: str = "gemini"
    google_api_key: str = ""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: str = ""
    openai_model: str = "gpt-4-turbo"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-opus-20240229"

    # ==========================================================================
    # Translation run
    # ==========================================================================

    default_source_language: str = "auto"
    default_target_language: str = "en"
    batch_size: int = 50
    max_retries: int = 3

    # ==========================================================================
    # Cache
    # ==========================================================================

    cache_ttl: int = 86_400_000  # milliseconds (24 hours)
    memory_cache_size: int = 1000
    cache_path: str = ""  # empty -> in-memory durable tier

    # ==========================================================================
    # Rate limiting
    # ==========================================================================

    max_requests_per_window: int = 60
    window_ms: int = 60_000

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

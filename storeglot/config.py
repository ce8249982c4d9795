"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


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
    # Translation
    # ==========================================================================

    # Which backend to use: "deepl", "llm" or "echo"
    translation_backend: str = "deepl"
    default_source_language: str = "en"
    default_target_language: str = "es"

    translation_batch_size: int = 10
    translation_batch_delay_ms: int = 100
    max_retries: int = 3
    retry_delay_ms: int = 1000
    request_timeout_seconds: float = 30.0

    # ==========================================================================
    # DeepL
    # ==========================================================================

    deepl_api_key: str = ""
    # Free-tier keys use https://api-free.deepl.com
    deepl_api_endpoint: str = "https://api.deepl.com"
    deepl_formality: str = "default"
    deepl_preserve_formatting: bool = True

    # ==========================================================================
    # AI / LLM
    # ==========================================================================

    llm_provider: str = "gemini"
    llm_model: str = ""
    google_api_key: str = ""
    openai_api_key: str = ""

    # ==========================================================================
    # Translation Memory
    # ==========================================================================

    translation_memory_path: str = ""
    translation_memory_max_entries: int | None = None

    # ==========================================================================
    # Saleor
    # ==========================================================================

    saleor_api_endpoint: str = ""
    saleor_auth_token: str = ""
    saleor_page_size: int = 50
    enabled_target_languages: str = "es,fr,de"

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def target_languages_list(self) -> list[str]:
        return [lang.strip() for lang in self.enabled_target_languages.split(",") if lang.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def batch_delay_seconds(self) -> float:
        return self.translation_batch_delay_ms / 1000

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once; later calls only adjust the level."""
    level_name = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(getattr(logging, level_name, logging.INFO))

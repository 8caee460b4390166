"""Client configuration using pydantic-settings."""

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RAG Chat"
    environment: str = "development"
    log_level: str = "info"
    debug: bool = False

    # Remote store (chat storage service)
    remote_store: Literal["http", "memory"] = "http"
    storage_api_url: str = "http://localhost:8080"
    storage_api_key: str = "changeme"
    storage_timeout: float = 30.0

    # History pagination
    history_page: int = Field(default=0, ge=0)
    history_page_size: int = Field(default=50, ge=1, le=100)

    # Response provider
    response_provider: Literal["simulated", "openai", "gemini", "groq"] = "simulated"
    include_context: bool = True
    system_prompt_path: Optional[Path] = None
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Google AI
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Groq (OpenAI-compatible)
    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    # Simulated provider
    simulated_latency_min: float = 0.5
    simulated_latency_max: float = 1.5

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings


def configure_logging(config: Settings | None = None) -> None:
    """Configure root logging from settings."""
    config = config or settings
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

"""Configuration Management."""

import os
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="SCREENFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Completion endpoint
    completion_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Chat completion endpoint URL",
    )
    completion_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""), description="Completion API key"
    )
    completion_model: str = Field(default="gpt-4o-mini", description="Completion model name")
    completion_temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Model temperature")
    completion_max_tokens: int = Field(default=2000, gt=0, description="Max output tokens")

    # Generation
    generation_timeout: float = Field(default=120.0, gt=0, description="Hard deadline for one completion call (seconds)")
    summary_max_chars: int = Field(default=800, gt=0, description="Max feature-document summary length in the prompt")
    repair_responses: bool = Field(default=False, description="Repair malformed JSON in completion text")

    # Storage
    database_url: str = Field(default="sqlite:///screenflow.db", description="Primary relational store URL")
    store_fail_max: int = Field(default=5, gt=0, description="Primary store failures before the breaker opens")
    store_reset_timeout: int = Field(default=30, gt=0, description="Seconds before a half-open breaker retries")
    local_cache_size: int = Field(default=1000, gt=0, description="Max screen sets held by the local fallback store")
    local_cache_ttl: float | None = Field(default=None, gt=0, description="Lifetime of local fallback entries (seconds)")

    # Board export
    board_api_url: str = Field(default="https://api.trello.com/1", description="Board API base URL")
    board_web_url: str = Field(default="https://trello.com/b", description="Public board URL prefix")
    board_api_key: str = Field(default="", description="Board API application key")
    board_timeout: float = Field(default=10.0, gt=0, description="Board API request timeout")
    export_card_delay: float = Field(default=0.3, ge=0.0, description="Delay between card creations (seconds)")
    export_backoff_base: float = Field(default=1.0, gt=0, description="First retry delay for throttled cards")
    export_max_retries: int = Field(default=3, ge=0, description="Retries per throttled card")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

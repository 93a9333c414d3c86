"""
Application configuration with environment-based settings.
All configuration is explicit, validated, and logged at startup.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development but require
    explicit configuration in production environments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    # Application
    app_name: str = Field(default="Memora Assistant", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    # LLM Provider (any chat-completions compatible endpoint)
    llm_api_key: str = Field(default="", description="Default API key for the model endpoint")
    llm_base_url: str = Field(default="https://api.openai.com/v1", description="Model endpoint base URL")
    llm_model: str = Field(default="gpt-4o-mini", description="LLM model to use")
    llm_max_tokens: int = Field(default=2000, ge=1, description="Max tokens per response")
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Model temperature")
    llm_timeout_seconds: float = Field(default=30.0, gt=0, description="Model request timeout")

    # Conversation
    history_window: int = Field(
        default=6,
        ge=0,
        description="Number of most recent turns replayed into each prompt"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    def get_safe_config_dict(self) -> dict:
        """Return configuration dict with secrets redacted for logging."""
        config = self.model_dump()
        if config.get("llm_api_key"):
            config["llm_api_key"] = "***REDACTED***"
        return config


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for the application lifetime.
    Use dependency injection in FastAPI routes for testability.
    """
    return Settings()

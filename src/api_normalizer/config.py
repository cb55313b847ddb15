"""Runtime settings loaded from ``API_NORMALIZER_*`` environment variables."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "0.1.0"

CANONICAL_OPENAPI_VERSION = "3.0.3"
DEFAULT_TITLE = "API"
DEFAULT_VERSION = "1.0.0"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="API_NORMALIZER_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="WARNING", description="Log level when --verbose is not given")
    # RAML resource trees deeper than this are rejected instead of walked
    max_resource_depth: int = Field(default=64, ge=1, description="Deepest RAML resource nesting accepted")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance.

    Environment variables are read on first use, not at import time.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None

"""Environment-based configuration using pydantic-settings.

Example:
    >>> from streamcase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.pipeline.close_abandoned
    True
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # STREAMCASE_PIPELINE_CLOSE_ABANDONED=false
    # STREAMCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STREAMCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = Field(default=None, description="Force console colors (None = auto-detect)")

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class PipelineSettings(BaseSettings):
    """Connector and runner behavior."""

    model_config = SettingsConfigDict(
        env_prefix="STREAMCASE_PIPELINE_",
        extra="ignore",
    )

    close_abandoned: bool = Field(
        default=True,
        description="Close an upstream generator when downstream terminates first",
    )
    log_stages: bool = Field(default=False, description="Debug-log every stage start and finish")


class IOSettings(BaseSettings):
    """Defaults for the line-oriented console and file adapters."""

    model_config = SettingsConfigDict(
        env_prefix="STREAMCASE_IO_",
        extra="ignore",
    )

    encoding: str = "utf-8"
    prompt: str = "> "
    strip_newlines: bool = True


class StreamcaseSettings(BaseSettings):
    """Root settings for streamcase.

    Loads configuration from environment variables with STREAMCASE_ prefix.

    Example environment variables:
        STREAMCASE_DEBUG=true
        STREAMCASE_LOG_FORMAT=json
        STREAMCASE_PIPELINE_LOG_STAGES=true
        STREAMCASE_IO_ENCODING=latin-1
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    io: IOSettings = Field(default_factory=IOSettings)

    @computed_field
    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise the configured level."""
        return "DEBUG" if self.debug else self.logging.level


@lru_cache(maxsize=1)
def get_settings() -> StreamcaseSettings:
    """Get the global settings instance (cached)."""
    return StreamcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    The next get_settings() call reloads configuration from environment.
    """
    get_settings.cache_clear()

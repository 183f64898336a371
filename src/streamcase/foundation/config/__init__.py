"""Configuration management using pydantic-settings."""

from .settings import (
    IOSettings,
    LoggingSettings,
    PipelineSettings,
    StreamcaseSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "IOSettings",
    "LoggingSettings",
    "PipelineSettings",
    "StreamcaseSettings",
    "clear_settings_cache",
    "get_settings",
]

"""Logging and display configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from hfsnext.shared.constants import DisplayConfig

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level name")
    file: str | None = Field(default=None, description="Optional JSON log file")
    use_rich: bool = Field(default=True, description="Rich console output")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Accept level names case-insensitively."""
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            msg = f"Invalid log level: {value}. Must be one of {_LOG_LEVELS}"
            raise ValueError(msg)
        return upper


class DisplaySettings(BaseModel):
    """How exam timestamps are rendered in summaries."""

    utc_offset_hours: float = Field(default=DisplayConfig.UTC_OFFSET_HOURS, ge=-12, le=14)
    time_format: str = Field(default=DisplayConfig.TIME_FORMAT)

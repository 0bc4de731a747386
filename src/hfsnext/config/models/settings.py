"""hfsnext Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hfsnext.config.models.api_settings import APISettings
from hfsnext.config.models.app_settings import DisplaySettings, LoggingSettings
from hfsnext.config.models.cache_settings import CacheSettings


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Environment variables override defaults, e.g.
    ``HFSNEXT_API__TIMEOUT=30`` or ``HFSNEXT_CACHE__DEFAULT_TTL=60``.
    """

    model_config = SettingsConfigDict(
        env_prefix="HFSNEXT_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file; environment variables still apply."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

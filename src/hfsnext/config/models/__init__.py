"""Configuration models for hfsnext."""

from .api_settings import APISettings
from .app_settings import DisplaySettings, LoggingSettings
from .cache_settings import CacheSettings
from .settings import Settings

__all__ = [
    "APISettings",
    "CacheSettings",
    "DisplaySettings",
    "LoggingSettings",
    "Settings",
]

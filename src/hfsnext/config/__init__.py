"""hfsnext Configuration Module

Unified access to configuration models and the settings loader.
"""

from __future__ import annotations

from .loader import get_config, load_settings, reload_config
from .models import (
    APISettings,
    CacheSettings,
    DisplaySettings,
    LoggingSettings,
    Settings,
)

__all__ = [
    "APISettings",
    "CacheSettings",
    "DisplaySettings",
    "LoggingSettings",
    "Settings",
    "get_config",
    "load_settings",
    "reload_config",
]

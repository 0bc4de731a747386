"""
hfsnext Constants Module

Centralized constants, grouped by concern:

- api: base URL, transport defaults, endpoint templates
- cache: cache namespace and freshness windows
- messages: fallback error messages and display sentinels
- cli: command-line defaults and help texts
- system: base time units
"""

from .api import APIConfig, EndpointTemplates, EnvelopeFields
from .cache import CacheConfig
from .cli import CLIDefaults, CLIHelp
from .messages import DisplayConfig, FallbackMessages
from .system import BASE_HOUR, BASE_MILLISECOND, BASE_MINUTE, BASE_SECOND

__all__ = [
    "BASE_HOUR",
    "BASE_MILLISECOND",
    "BASE_MINUTE",
    "BASE_SECOND",
    "APIConfig",
    "CLIDefaults",
    "CLIHelp",
    "CacheConfig",
    "DisplayConfig",
    "EndpointTemplates",
    "EnvelopeFields",
    "FallbackMessages",
]

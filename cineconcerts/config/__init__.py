"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: load_settings(), EnvConfigProvider
Hidden: Environment parsing, .env loading, validation
"""

from .provider import (
    ConfigProvider,
    EnvConfigProvider,
    GeocodeConfig,
    RateLimitConfig,
    SearchConfig,
    ServerConfig,
    SessionConfig,
    Settings,
    load_settings,
)

__all__ = [
    "ConfigProvider",
    "EnvConfigProvider",
    "GeocodeConfig",
    "RateLimitConfig",
    "SearchConfig",
    "ServerConfig",
    "SessionConfig",
    "Settings",
    "load_settings",
]

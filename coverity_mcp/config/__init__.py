"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: EnvConfigProvider.get_coverity_config(), get_server_config(), get_connection_status()
Hidden: Environment parsing, defaults, validation logic

Can be replaced with a different provider implementing ConfigProvider.
"""

from .provider import (
    ConfigProvider,
    ConfigurationError,
    ConnectionStatus,
    CoverityConfig,
    EnvConfigProvider,
    ServerConfig,
)

__all__ = [
    "ConfigProvider",
    "ConfigurationError",
    "ConnectionStatus",
    "CoverityConfig",
    "EnvConfigProvider",
    "ServerConfig",
]

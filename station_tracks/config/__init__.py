"""
Configuration package for Station Tracks

Exposes the settings singleton accessors and the dataclass sections that make
up the configuration (server endpoints, stream behavior, network, logging).
"""

from .settings import (
    Settings,
    ServerConfig,
    StreamConfig,
    NetworkConfig,
    LoggingConfig,
    get_settings,
    reload_settings,
)

__all__ = [
    'Settings',
    'ServerConfig',
    'StreamConfig',
    'NetworkConfig',
    'LoggingConfig',
    'get_settings',
    'reload_settings',
]

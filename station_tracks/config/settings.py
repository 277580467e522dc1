"""
Configuration management for Station Tracks

This module handles loading, validation, and management of application settings
from YAML files and environment variables. The configuration is organized into
logical sections using dataclasses:
- Server endpoints (HTTP base URL, WebSocket base URL, channel, page size)
- Live stream behavior (reconnect, heartbeat interval, reconnect delay)
- Network options (user agent, request timeout)
- Logging output

Deployment-specific values (server URLs, channel) can be supplied through
environment variables or a .env file, while everything else lives in YAML.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict
from dotenv import load_dotenv

from ..core.exceptions import ConfigError

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class ServerConfig:
    """
    Station server endpoints and listing preferences

    An empty websocket_url disables the live stream entirely; the HTTP
    listing keeps working on its own.
    """
    request_url: str = "http://localhost:8080"
    websocket_url: str = ""
    underground: bool = False
    list_count: int = 25
    send_initial: bool = True


@dataclass
class StreamConfig:
    """
    Live stream connection behavior

    Controls the heartbeat cadence sent while the stream is open and
    whether (and how soon) a dropped connection is re-established.
    """
    auto_reconnect: bool = True
    heartbeat_interval: float = 50.0
    reconnect_delay: float = 3.0


@dataclass
class NetworkConfig:
    """
    HTTP client settings

    A request_timeout of 0 leaves requests without a client-side timeout.
    """
    user_agent: str = "Station-Tracks/0.4"
    request_timeout: float = 0


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, then applies environment
    variable overrides, and exposes each section as a dataclass attribute.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".station-tracks"

        self.server = ServerConfig()
        self.stream = StreamConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()

        self._load_config()
        self._load_environment_variables()

    def _sections(self) -> Dict[str, Any]:
        return {
            'server': self.server,
            'stream': self.stream,
            'network': self.network,
            'logging': self.logging,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in order of precedence; the first
        existing file wins.

        Raises:
            ConfigError: If an explicitly given file cannot be parsed
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except (OSError, yaml.YAMLError) as e:
                    if path == self.config_path:
                        raise ConfigError(
                            f"Failed to load config from {path}: {e}",
                            details={'file_path': str(path)}
                        ) from e
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only keys that exist on the matching dataclass are applied; unknown
        sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Apply environment variable overrides

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'STATION_TRACKS_URL': lambda v: setattr(self.server, 'request_url', v),
            'STATION_TRACKS_WS_URL': lambda v: setattr(self.server, 'websocket_url', v),
            'STATION_TRACKS_UNDERGROUND': lambda v: setattr(self.server, 'underground', _parse_bool(v)),
            'STATION_TRACKS_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_config_directory(self) -> Path:
        """Get the expanded config directory path"""
        return self.config_dir.expanduser()

    @property
    def websocket_url(self) -> Optional[str]:
        """The live stream base URL, or None when the stream is disabled"""
        return self.server.websocket_url or None

    def save_config(self, path: Optional[str] = None) -> None:
        """
        Save current configuration to a YAML file

        Args:
            path: Custom path to save config, defaults to user config directory

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        target = Path(path) if path else self.get_config_directory() / "config.yaml"

        config_data = {name: asdict(section) for name, section in self._sections().items()}

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save config to {target}: {e}",
                              details={'file_path': str(target)}) from e

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable problems, empty when the configuration is valid
        """
        from ..utils.helpers import is_valid_url

        errors = []

        if not is_valid_url(self.server.request_url, schemes=('http', 'https')):
            errors.append(f"Invalid server URL: {self.server.request_url}")

        if self.server.websocket_url and not is_valid_url(self.server.websocket_url, schemes=('ws', 'wss')):
            errors.append(f"Invalid websocket URL: {self.server.websocket_url}")

        if int(self.server.list_count) <= 0:
            errors.append(f"list_count must be positive, got {self.server.list_count}")

        if float(self.stream.heartbeat_interval) <= 0:
            errors.append(f"heartbeat_interval must be positive, got {self.stream.heartbeat_interval}")

        if float(self.stream.reconnect_delay) < 0:
            errors.append(f"reconnect_delay cannot be negative, got {self.stream.reconnect_delay}")

        if float(self.network.request_timeout) < 0:
            errors.append(f"request_timeout cannot be negative, got {self.network.request_timeout}")

        return errors

    def __str__(self) -> str:
        channel = 'underground' if self.server.underground else 'FM'
        stream = self.server.websocket_url or 'disabled'
        return f"Settings(Server: {self.server.request_url}, Stream: {stream}, Channel: {channel})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings

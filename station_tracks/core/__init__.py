"""
Core package: exception hierarchy and operation outcomes shared by all components
"""

from .exceptions import (
    StationTracksError,
    ConfigError,
    TransportError,
    StreamConnectionError,
    TrackDecodeError,
)
from .outcome import Outcome

__all__ = [
    'StationTracksError',
    'ConfigError',
    'TransportError',
    'StreamConnectionError',
    'TrackDecodeError',
    'Outcome',
]

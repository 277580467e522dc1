"""
Live package: the WebSocket track stream client and its connection states
"""

from .receiver import (
    LiveStreamClient,
    ConnectionState,
    HEARTBEAT_MESSAGE,
    CURRENT_TRACK_REQUEST,
)

__all__ = [
    'LiveStreamClient',
    'ConnectionState',
    'HEARTBEAT_MESSAGE',
    'CURRENT_TRACK_REQUEST',
]

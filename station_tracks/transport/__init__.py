"""
Transport package: the HTTP request helper and the duplex WebSocket wrapper
"""

from .http import HttpTransport, HttpResponse
from .socket import WebSocketTransport, SocketHandlers, SocketFactory

__all__ = [
    'HttpTransport',
    'HttpResponse',
    'WebSocketTransport',
    'SocketHandlers',
    'SocketFactory',
]

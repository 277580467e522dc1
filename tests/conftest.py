"""Test configuration and fixtures"""

import json
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from station_tracks.core.exceptions import TransportError
from station_tracks.sync.coordinator import SyncCoordinator
from station_tracks.transport.http import HttpResponse
from station_tracks.transport.socket import SocketHandlers


class FakeHttpTransport:
    """
    Stand-in for HttpTransport that records requests and replays queued responses

    Queue entries are HttpResponse objects or exceptions to raise.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, status: int = 200, body: Any = None) -> None:
        text = body if isinstance(body, str) else json.dumps(body)
        self.responses.append(HttpResponse(status=status, body=text))

    def queue_error(self, message: str = "connection refused") -> None:
        self.responses.append(TransportError(message))

    async def fetch_url(self, absolute_path, params=None, method='GET', json_body=None):
        self.calls.append({
            'url': absolute_path,
            'params': dict(params) if params else None,
            'method': method,
            'json': json_body,
        })
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {absolute_path}")
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self):
        self.closed = True


class FakeSocket:
    """
    In-memory socket with the WebSocketTransport surface

    `open()` succeeds by default; set `fail_open` to make it report
    on_error + on_close and raise TransportError like a refused handshake.
    """

    def __init__(self, url: str, handlers: SocketHandlers, fail_open: bool = False):
        self.url = url
        self.handlers = handlers
        self.fail_open = fail_open
        self.sent: List[str] = []
        self.opened = False
        self.closed = False

    @property
    def is_open(self) -> bool:
        return self.opened and not self.closed

    async def open(self) -> None:
        if self.fail_open:
            error = TransportError("handshake refused")
            self.handlers.on_error(error)
            self.closed = True
            self.handlers.on_close()
            raise error
        self.opened = True
        self.handlers.on_open()

    def send(self, text: str) -> None:
        if not self.is_open:
            raise TransportError("Cannot send on a closed websocket")
        self.sent.append(text)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.handlers.on_close()

    # Test helpers

    def receive(self, payload: Any) -> None:
        """Deliver a server message"""
        self.handlers.on_message(payload if isinstance(payload, str) else json.dumps(payload))

    def drop(self) -> None:
        """Simulate the server closing the connection"""
        if not self.closed:
            self.closed = True
            self.handlers.on_close()


class FakeSocketFactory:
    """Socket factory that remembers every socket it built"""

    def __init__(self):
        self.sockets: List[FakeSocket] = []
        self.fail_next = 0

    def __call__(self, url: str, handlers: SocketHandlers) -> FakeSocket:
        fail = self.fail_next > 0
        if fail:
            self.fail_next -= 1
        socket = FakeSocket(url, handlers, fail_open=fail)
        self.sockets.append(socket)
        return socket

    @property
    def last(self) -> FakeSocket:
        return self.sockets[-1]


def make_track_json(track_id: int, artist: str = "Test Artist", title: str = "Test Song",
                    time: str = "2024-03-01T12:00:00Z", group: str = "A", kind: str = "track",
                    streaming: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Server-shaped track object"""
    return {
        'id': track_id,
        'artist': artist,
        'title': title,
        'time': time,
        'group': group,
        'type': kind,
        'streaming': streaming if streaming is not None else [],
    }


def make_page(ids, next_url: Optional[str] = None) -> Dict[str, Any]:
    """Server-shaped listing page"""
    return {
        'tracks': [make_track_json(track_id) for track_id in ids],
        '_links': {'next': next_url},
    }


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def http():
    return FakeHttpTransport()


@pytest.fixture
def socket_factory():
    return FakeSocketFactory()


@pytest.fixture
def changes() -> List[Tuple]:
    """Collects every snapshot published by the coordinator"""
    return []


@pytest.fixture
def coordinator(changes):
    return SyncCoordinator(on_change=changes.append)


@pytest.fixture
def sample_track_data():
    """Sample track data for testing"""
    return make_track_json(
        42,
        artist="Daft Punk",
        title="Around the World",
        time="2024-03-01T12:30:00Z",
        group="Rotation",
        streaming=[{
            'link': 'https://open.spotify.com/track/abc',
            'artwork': 'https://i.scdn.co/image/abc',
            'service': 'spotify',
        }],
    )


@pytest.fixture
def sample_event_data():
    return make_track_json(43, artist="Station ID", title="", group="Event", kind="event")

"""
Live stream client for tracks pushed by the station server

Owns the lifecycle of the single WebSocket connection to `/api/tracks/stream`
and feeds every pushed track into the sync coordinator.

Connection state machine:
    DISCONNECTED -> CONNECTING -> OPEN -> CLOSING -> DISCONNECTED
    Any transport error moves straight back to DISCONNECTED.
    Pushed tracks are only applied while OPEN.

Timers:
- Heartbeat: while OPEN, `{"heartbeat":""}` is sent every `heartbeat_interval`
  seconds. The timer is cancelled on every transition out of OPEN and is inert
  if it ever fires outside OPEN.
- Reconnect: with auto reconnect enabled, each close schedules exactly one
  reconnect attempt `reconnect_delay` seconds later. A failed attempt closes
  again, which schedules the next one.

Channel changes: the server reads the channel (FM or underground) from the
connection's query string, so `set_channel()` closes the connection and lets
the reconnect logic open a new one with the new value.

Events from a socket that has since been replaced are ignored, keyed by a
per-connection generation number.
"""

import asyncio
import json
from enum import Enum
from functools import partial
from typing import Callable, Optional

from ..core.exceptions import StreamConnectionError, TrackDecodeError, TransportError
from ..sync.coordinator import SyncCoordinator
from ..tracks.models import Track, TrackBroadcast
from ..transport.socket import SocketFactory, SocketHandlers, WebSocketTransport
from ..utils.helpers import build_url
from ..utils.logger import get_logger

HEARTBEAT_MESSAGE = json.dumps({"heartbeat": ""})
CURRENT_TRACK_REQUEST = json.dumps({"request": "current"})


class ConnectionState(Enum):
    """Lifecycle states of the live stream connection"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"


class LiveStreamClient:
    """
    Receives tracks live from the station as they are played

    Attributes:
        websocket_url: Base WebSocket URL (no path or query); None disables the stream
        underground: Current channel, True for underground and False for FM
        send_initial: Ask the server to send the currently playing track on connect
        receive_track: Callback for each pushed track, the coordinator's
                       `insert_from_stream` unless overridden
        state: Current ConnectionState
    """

    def __init__(
        self,
        coordinator: SyncCoordinator,
        websocket_url: Optional[str] = None,
        underground: bool = False,
        send_initial: bool = False,
        receive_track: Optional[Callable[[Track], None]] = None,
        socket_factory: Optional[SocketFactory] = None,
        heartbeat_interval: float = 50.0,
        reconnect_delay: float = 3.0
    ):
        """
        Args:
            coordinator: Collection owner; also consulted for the searching flag
            websocket_url: Base URL of the station's WebSocket server, or None
            underground: Stream the underground channel instead of FM
            send_initial: Request the current track immediately upon connecting
            receive_track: Override for the pushed-track callback
            socket_factory: Builds the socket for a URL and handlers
            heartbeat_interval: Seconds between heartbeats while open
            reconnect_delay: Seconds to wait after a close before reconnecting
        """
        self.logger = get_logger(__name__)
        self.coordinator = coordinator
        self.websocket_url = websocket_url.rstrip('/') if websocket_url else None
        self.underground = underground
        self.send_initial = send_initial
        self.receive_track = receive_track or coordinator.insert_from_stream
        self.socket_factory = socket_factory or WebSocketTransport
        self.heartbeat_interval = heartbeat_interval
        self.reconnect_delay = reconnect_delay

        self.state = ConnectionState.DISCONNECTED
        self.auto_reconnect = False
        self._socket = None
        self._generation = 0
        self._heartbeat_handle: Optional[asyncio.TimerHandle] = None
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._reconnect_task: Optional[asyncio.Task] = None

    @property
    def stream_url(self) -> Optional[str]:
        """Full stream URL for the current channel, None when no URL is configured"""
        if self.websocket_url is None:
            return None
        return build_url(f"{self.websocket_url}/api/tracks/stream",
                         {'underground': self.underground, 'sendInitial': self.send_initial})

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_handle is not None

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self.state:
            self.logger.debug(f"Track stream {self.state.value} -> {state.value}")
            self.state = state

    async def connect(self, auto_reconnect: bool = False) -> bool:
        """
        Open the live stream connection

        Does nothing when no WebSocket URL is configured or when a connection
        (open or still being established) already exists.

        Args:
            auto_reconnect: Reconnect `reconnect_delay` seconds after every close

        Returns:
            True once the connection is open, False if nothing was attempted

        Raises:
            StreamConnectionError: If the transport failed to open the connection
        """
        url = self.stream_url
        if url is None:
            return False
        if self._socket is not None or self.state is not ConnectionState.DISCONNECTED:
            return False

        self._cancel_reconnect()
        self.auto_reconnect = auto_reconnect
        self._generation += 1
        generation = self._generation

        handlers = SocketHandlers(
            on_open=partial(self._handle_open, generation),
            on_message=partial(self._handle_message, generation),
            on_error=partial(self._handle_error, generation),
            on_close=partial(self._handle_close, generation),
        )
        self._socket = self.socket_factory(url, handlers)
        self._set_state(ConnectionState.CONNECTING)
        self.logger.debug(f"Connecting to track stream {url}")

        try:
            await self._socket.open()
        except TransportError as e:
            self._discard(generation)
            self.logger.error(f"Could not connect to track stream: {e}")
            raise StreamConnectionError(f"Failed to open track stream: {e}", details={'url': url}) from e
        except asyncio.CancelledError:
            self._discard(generation)
            raise

        return generation == self._generation and self.state is ConnectionState.OPEN

    def _discard(self, generation: int) -> None:
        if generation == self._generation and self._socket is not None and not self.is_open:
            self._socket = None
            self._cancel_heartbeat()
            self._set_state(ConnectionState.DISCONNECTED)

    async def set_channel(self, underground: bool) -> None:
        """
        Switch the streamed channel

        The connection is closed and, with auto reconnect enabled, re-established
        under the new channel by the close handler.

        Args:
            underground: True for the underground channel, False for FM
        """
        if underground == self.underground:
            return

        self.logger.info(f"Switching track stream to {'underground' if underground else 'FM'}")
        self.underground = underground
        self._cancel_heartbeat()
        if self._socket is not None:
            self._set_state(ConnectionState.CLOSING)
            await self._socket.close()

    def request_current_track(self) -> bool:
        """
        Ask the server for the currently playing track

        The answer, if any, arrives as an ordinary stream message.

        Returns:
            True if the request was sent, False if the connection is not open
        """
        if not self.is_open or self._socket is None:
            return False

        try:
            self._socket.send(CURRENT_TRACK_REQUEST)
        except TransportError as e:
            self.logger.warning(f"Could not request current track: {e}")
            return False
        return True

    async def disconnect(self) -> None:
        """Close the connection for good: no reconnect, no timers left behind"""
        self.auto_reconnect = False
        self._cancel_reconnect()
        task = self._reconnect_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self._reconnect_task = None
        self._cancel_heartbeat()

        socket = self._socket
        if socket is not None:
            self._set_state(ConnectionState.CLOSING)
            await socket.close()
        self._socket = None
        self._set_state(ConnectionState.DISCONNECTED)

    # Socket events -------------------------------------------------------

    def _handle_open(self, generation: int) -> None:
        if generation != self._generation or self._socket is None:
            return
        self._set_state(ConnectionState.OPEN)
        self.logger.info(f"Connected to track stream ({'underground' if self.underground else 'FM'})")
        self._schedule_heartbeat()

    def _handle_message(self, generation: int, data: str) -> None:
        if generation != self._generation:
            return
        if not self.is_open:
            self.logger.debug(f"Track stream {self.state.value}, ignoring message")
            return
        if self.coordinator.searching:
            self.logger.debug("Searching, ignoring streamed track")
            return

        try:
            broadcast = TrackBroadcast.from_json(json.loads(data))
        except (ValueError, TrackDecodeError) as e:
            self.logger.warning(f"Ignoring malformed stream message: {e}")
            return

        self.logger.debug(f"Received track {broadcast.track.id} (requested={broadcast.requested})")
        self.receive_track(broadcast.track)

    def _handle_error(self, generation: int, error: BaseException) -> None:
        if generation != self._generation:
            return
        self.logger.error(f"Track stream error: {error}")
        self._cancel_heartbeat()
        self._set_state(ConnectionState.DISCONNECTED)

    def _handle_close(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._cancel_heartbeat()
        self._socket = None
        self._set_state(ConnectionState.DISCONNECTED)
        self.logger.info("Track stream closed")
        if self.auto_reconnect:
            self._schedule_reconnect()

    # Timers --------------------------------------------------------------

    def _schedule_heartbeat(self) -> None:
        self._cancel_heartbeat()
        loop = asyncio.get_running_loop()
        self._heartbeat_handle = loop.call_later(self.heartbeat_interval, self._send_heartbeat)

    def _cancel_heartbeat(self) -> None:
        if self._heartbeat_handle is not None:
            self._heartbeat_handle.cancel()
            self._heartbeat_handle = None

    def _send_heartbeat(self) -> None:
        self._heartbeat_handle = None
        if not self.is_open or self._socket is None:
            return

        try:
            self._socket.send(HEARTBEAT_MESSAGE)
        except TransportError as e:
            self.logger.warning(f"Heartbeat failed: {e}")
        self._schedule_heartbeat()

    def _schedule_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            return
        self.logger.info(f"Reconnecting to track stream in {self.reconnect_delay:g}s")
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(self.reconnect_delay, self._start_reconnect)

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    def _start_reconnect(self) -> None:
        self._reconnect_handle = None
        self._reconnect_task = asyncio.ensure_future(self._reconnect())

    async def _reconnect(self) -> None:
        try:
            await self.connect(self.auto_reconnect)
        except StreamConnectionError as e:
            self.logger.warning(f"Reconnect to track stream failed: {e}")
        finally:
            if self._reconnect_task is asyncio.current_task():
                self._reconnect_task = None

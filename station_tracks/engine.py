"""
Track engine: wires the sync components together from application settings

The engine is what a front end (the CLI, a web view, a bot) holds on to. It owns
one sync coordinator and builds the pagination client and the live stream client
around it, so both write into the same collection.
"""

from typing import Callable, Optional, Tuple

from .config.settings import Settings, get_settings
from .core.exceptions import StreamConnectionError
from .core.outcome import Outcome
from .live.receiver import LiveStreamClient
from .sync.coordinator import SyncCoordinator, TracksObserver
from .tracks.models import Track
from .tracks.pagination import PaginationClient
from .transport.http import HttpTransport
from .transport.socket import SocketFactory
from .utils.logger import get_logger


class TrackEngine:
    """
    Facade over the coordinator, pagination client and live stream client

    Usage:
        async with TrackEngine(on_change=render) as engine:
            await engine.start()
            await engine.pagination.load_more()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        on_change: Optional[TracksObserver] = None,
        on_stream_track: Optional[Callable[[Track], None]] = None,
        http_transport: Optional[HttpTransport] = None,
        socket_factory: Optional[SocketFactory] = None
    ):
        """
        Args:
            settings: Application settings, the global settings when omitted
            on_change: Observer receiving the collection after every change
            on_stream_track: Called for each streamed track that made it into the collection
            http_transport: HTTP transport override
            socket_factory: WebSocket factory override
        """
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)
        self.on_stream_track = on_stream_track

        self.coordinator = SyncCoordinator(on_change)
        self.http = http_transport or HttpTransport(
            user_agent=self.settings.network.user_agent,
            timeout=float(self.settings.network.request_timeout) or None,
        )
        self.pagination = self._build_pagination(bool(self.settings.server.underground))
        self.live = LiveStreamClient(
            self.coordinator,
            websocket_url=self.settings.websocket_url,
            underground=bool(self.settings.server.underground),
            send_initial=bool(self.settings.server.send_initial),
            receive_track=self._receive_track,
            socket_factory=socket_factory,
            heartbeat_interval=float(self.settings.stream.heartbeat_interval),
            reconnect_delay=float(self.settings.stream.reconnect_delay),
        )

    def _build_pagination(self, underground: bool) -> PaginationClient:
        return PaginationClient(
            self.coordinator,
            self.settings.server.request_url,
            underground=underground,
            list_count=int(self.settings.server.list_count),
            transport=self.http,
        )

    def _receive_track(self, track: Track) -> None:
        if self.coordinator.insert_from_stream(track) and self.on_stream_track is not None:
            self.on_stream_track(track)

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return self.coordinator.tracks

    @property
    def underground(self) -> bool:
        return self.pagination.underground

    async def start(self) -> Outcome:
        """
        Load the first page and open the live stream

        A stream that cannot be opened is logged; with auto reconnect enabled
        it keeps retrying in the background.

        Returns:
            Outcome of the first page load
        """
        self.pagination.reset()
        outcome = await self.pagination.search()
        await self.connect_stream()
        return outcome

    async def connect_stream(self) -> bool:
        """Open the live stream if configured; failures are logged, not raised"""
        try:
            return await self.live.connect(bool(self.settings.stream.auto_reconnect))
        except StreamConnectionError as e:
            self.logger.warning(f"Live updates unavailable: {e}")
            return False

    async def set_channel(self, underground: bool) -> Outcome:
        """
        Switch both the listing and the live stream to another channel

        The collection is replaced with the first page of the new channel.

        Returns:
            Outcome of the first page load; a no-op success when unchanged
        """
        if underground == self.pagination.underground:
            return Outcome.success(status=None)

        self.pagination = self._build_pagination(underground)
        await self.live.set_channel(underground)
        return await self.pagination.search()

    async def close(self) -> None:
        """Stop the live stream and release the HTTP session"""
        await self.live.disconnect()
        await self.http.close()

    async def __aenter__(self) -> 'TrackEngine':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

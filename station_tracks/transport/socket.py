"""
Duplex socket abstraction for the live track stream

WebSocketTransport wraps one aiohttp client WebSocket and reports what happens
to it through four callbacks (open, message, error, close), the same events a
browser WebSocket exposes. It does not decode payloads or reconnect; the live
stream client layers its state machine on top of these events.

Any object with the same `open()`, `send()`, `close()` and `is_open` surface can
stand in for it, which is how the tests drive the live client without a server.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional, Set

import aiohttp

from ..core.exceptions import TransportError
from ..utils.logger import get_logger


@dataclass
class SocketHandlers:
    """Callbacks invoked by a socket; all run on the event loop thread"""
    on_open: Callable[[], None]
    on_message: Callable[[str], None]
    on_error: Callable[[BaseException], None]
    on_close: Callable[[], None]


class WebSocketTransport:
    """
    One WebSocket connection with callback-style events

    Event order is always: `on_open` at most once, any number of `on_message`
    and `on_error`, then `on_close` exactly once. A failed `open()` reports
    `on_error` followed by `on_close` before raising.
    """

    def __init__(self, url: str, handlers: SocketHandlers, session: Optional[aiohttp.ClientSession] = None):
        """
        Args:
            url: Full WebSocket URL including the query string
            handlers: Event callbacks
            session: Existing aiohttp session; a private one is created otherwise
        """
        self.url = url
        self.handlers = handlers
        self.logger = get_logger(__name__)
        self._session = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._reader: Optional[asyncio.Task] = None
        self._pending_sends: Set[asyncio.Task] = set()
        self._closed_notified = False

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def open(self) -> None:
        """
        Open the connection and start reading messages in a background task

        Raises:
            TransportError: If the connection could not be established
        """
        if self._session is None:
            self._session = aiohttp.ClientSession()

        self.logger.debug(f"Opening websocket {self.url}")
        try:
            self._ws = await self._session.ws_connect(self.url)
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            await self._release_session()
            if not self._closed_notified:
                self.handlers.on_error(e)
            self._notify_closed()
            raise TransportError(
                f"Failed to open websocket {self.url}: {e}",
                details={'url': self.url, 'original_error': e}
            ) from e
        except asyncio.CancelledError:
            await self._release_session()
            self._notify_closed()
            raise

        if self._closed_notified:
            # close() was called while the handshake was in flight
            await self._ws.close()
            await self._release_session()
            return

        self.handlers.on_open()
        self._reader = asyncio.ensure_future(self._read_loop())

    async def _read_loop(self) -> None:
        try:
            async for msg in self._ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self.handlers.on_message(msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    self.handlers.on_message(msg.data.decode('utf-8', errors='replace'))
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self.handlers.on_error(self._ws.exception() or TransportError("Websocket error frame"))
        except (aiohttp.ClientError, OSError) as e:
            self.handlers.on_error(e)
        finally:
            if self._ws is not None and not self._ws.closed:
                await self._ws.close()
            await self._release_session()
            self._notify_closed()

    def send(self, text: str) -> None:
        """
        Queue a text frame for sending

        Raises:
            TransportError: If the connection is not open
        """
        if not self.is_open:
            raise TransportError("Cannot send on a closed websocket", details={'url': self.url})

        task = asyncio.ensure_future(self._send(text))
        self._pending_sends.add(task)
        task.add_done_callback(self._pending_sends.discard)

    async def _send(self, text: str) -> None:
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, OSError) as e:
            self.handlers.on_error(e)

    async def close(self) -> None:
        """Close the connection and wait until `on_close` has been delivered"""
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()

        if self._reader is not None and self._reader is not asyncio.current_task():
            await self._reader
        elif self._reader is None:
            # Handshake in flight or never started; open() releases the session
            self._notify_closed()

    async def _release_session(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    def _notify_closed(self) -> None:
        if self._closed_notified:
            return
        self._closed_notified = True
        self.handlers.on_close()


SocketFactory = Callable[[str, SocketHandlers], WebSocketTransport]

"""
HTTP request helper for the station server

A thin wrapper around an aiohttp ClientSession. It knows how to build query
strings the way the server expects and how to send JSON bodies, and it returns
the status and raw body of every response. It owns no domain logic: deciding
what a non-200 status means is left to the callers.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from ..core.exceptions import TransportError
from ..utils.helpers import build_url
from ..utils.logger import get_logger


@dataclass(frozen=True)
class HttpResponse:
    """Status code and undecoded body of a completed request"""
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return self.status == 200

    def json(self) -> Any:
        """
        Decode the body as JSON

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.body)


class HttpTransport:
    """
    Minimal async HTTP client used by the pagination client and group listing

    The session is created lazily on first request so the transport can be
    constructed outside a running event loop. A session passed in by the caller
    is used as-is and is not closed by `close()`.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: str = "Station-Tracks/0.4",
        timeout: Optional[float] = None
    ):
        """
        Args:
            session: Existing aiohttp session to reuse
            user_agent: User-Agent header sent with every request
            timeout: Total request timeout in seconds, None or 0 for no timeout
        """
        self.logger = get_logger(__name__)
        self.user_agent = user_agent
        self.timeout = timeout or None
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={'User-Agent': self.user_agent},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self._session

    async def fetch_url(
        self,
        absolute_path: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = 'GET',
        json_body: Optional[Dict[str, Any]] = None
    ) -> HttpResponse:
        """
        Send a request and read the whole response body

        Args:
            absolute_path: Request URL without (or with a server-supplied) query string
            params: Query parameters appended to the path
            method: HTTP method
            json_body: JSON-encoded request body, sent with a JSON content type

        Returns:
            HttpResponse with the status and body text

        Raises:
            TransportError: If the request could not be completed
        """
        url = build_url(absolute_path, params)
        headers = {}
        data = None
        if json_body is not None:
            headers['Content-Type'] = 'application/json'
            data = json.dumps(json_body)

        self.logger.debug(f"{method} {url}")
        try:
            async with self._get_session().request(method, url, data=data, headers=headers) as response:
                body = await response.text()
                return HttpResponse(status=response.status, body=body)
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"{method} {url} failed: {e}",
                details={'url': url, 'method': method, 'original_error': e}
            ) from e

    async def close(self) -> None:
        """Close the session if this transport created it"""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

"""
Pagination client for the station's track listing endpoints

Drives the cursor-paginated `/api/tracks/list` endpoint and the add/update/delete
admin endpoints, writing every result through the sync coordinator.

Listing model:
- The first page URL is built from the page size and the channel flag
- Each successful page stores the server's `_links.next` URL as the new cursor
- `load_more()` appends the next (older) page; `search()` replaces the collection

Failure policy:
- Exactly one attempt per call, never retried
- Non-200 responses and transport failures are logged and returned as a failed
  Outcome; the cursor, the collection and the searching flag are left as they were
- Nothing is raised to the caller
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from ..core.exceptions import TrackDecodeError, TransportError
from ..core.outcome import Outcome
from ..transport.http import HttpResponse, HttpTransport
from ..utils.helpers import build_url, to_epoch_ms
from ..utils.logger import get_logger
from .groups import get_groups
from .models import EVENT_GROUP, Track

if TYPE_CHECKING:
    from ..sync.coordinator import SyncCoordinator


class PaginationClient:
    """
    Cursor-driven track listing, search and CRUD against the station server

    Attributes:
        request_url: Server base URL all endpoints are built from
        underground: True to work against the underground playlist, False for FM
        list_count: Number of tracks requested per page
        base_list_url: Listing endpoint without query parameters
        original_url: First-page URL, restored by `reset()`
        next_url: Cursor for the next `load_more()` call; None once the server
                  reports no further page
    """

    def __init__(
        self,
        coordinator: 'SyncCoordinator',
        request_url: str,
        underground: bool = False,
        list_count: int = 25,
        transport: Optional[HttpTransport] = None
    ):
        """
        Args:
            coordinator: Owner of the collection all results are written to
            request_url: Base URL of the station server
            underground: Use the underground playlist instead of FM
            list_count: Tracks per page
            transport: HTTP transport, a default HttpTransport when omitted
        """
        self.logger = get_logger(__name__)
        self.coordinator = coordinator
        self.transport = transport or HttpTransport()
        self.request_url = request_url.rstrip('/')
        self.underground = underground
        self.list_count = list_count
        self.base_list_url = f"{self.request_url}/api/tracks/list"
        self.original_url = build_url(self.base_list_url, self._listing_params())
        self.next_url: Optional[str] = self.original_url

    def _listing_params(self) -> Dict[str, Any]:
        return {'count': self.list_count, 'underground': self.underground}

    @property
    def has_more(self) -> bool:
        return self.next_url is not None

    def reset(self) -> None:
        """Restore the cursor to the first page. No network call."""
        self.next_url = self.original_url

    async def _request(
        self,
        label: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = 'GET',
        json_body: Optional[Dict[str, Any]] = None
    ) -> Tuple[Optional[HttpResponse], Optional[Outcome]]:
        """
        Send one request, converting failures into an Outcome

        Returns:
            (response, None) on HTTP 200, otherwise (None, failed Outcome)
        """
        try:
            response = await self.transport.fetch_url(url, params, method=method, json_body=json_body)
        except TransportError as e:
            self.logger.error(f"[{label}] Request failed: {e}")
            return None, Outcome.failure(error=str(e))

        if response.status != 200:
            self.logger.error(f"[{label}] Erroneous status of {response.status}: {response.body}")
            return None, Outcome.failure(status=response.status, error=response.body)

        return response, None

    async def load_more(self) -> Outcome:
        """
        Fetch the page at the current cursor and append it to the collection

        This is also used for the initial load after construction or `reset()`.
        The searching flag is left untouched, so paging through a search result
        keeps stream updates suppressed.

        Returns:
            Outcome of the fetch
        """
        if self.next_url is None:
            self.logger.debug("No further pages to load")
            return Outcome.success(status=None)
        return await self.load_tracks_from_url(self.next_url)

    async def load_tracks_from_url(self, url: str, override_list: bool = False) -> Outcome:
        """
        Load one page from the given URL into the collection

        Args:
            url: Listing URL including its query string
            override_list: Replace the whole collection instead of appending

        Returns:
            Outcome of the fetch; on failure nothing is modified
        """
        response, failure = await self._request('tracks/list', url)
        if failure is not None:
            return failure

        try:
            payload = response.json()
            next_url = payload['_links'].get('next')
            tracks = Track.list_from_json(payload['tracks'])
        except (ValueError, KeyError, TypeError, AttributeError, TrackDecodeError) as e:
            self.logger.error(f"[tracks/list] Malformed page from {url}: {e}")
            return Outcome.failure(status=response.status, error=f"Malformed page: {e}")

        self.next_url = next_url
        if override_list:
            self.coordinator.replace_all(tracks)
        else:
            self.coordinator.append_page(tracks)

        self.logger.debug(f"Loaded {len(tracks)} tracks (override={override_list}), next: {next_url}")
        return Outcome.success(response.status)

    async def search(
        self,
        artist: Optional[str] = None,
        title: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Outcome:
        """
        Replace the collection with tracks matching the given filters

        Empty or missing filters are not sent. The date range is only applied
        when both bounds are given. With no usable filter this is a fresh listing
        from the first page and clears the searching flag; with any filter the
        searching flag is set before the request goes out so streamed tracks are
        suppressed while the result is loading and displayed.

        Args:
            artist: Artist to search for
            title: Title to search for (sent as `song`)
            start_date: Inclusive lower bound of the played-at range
            end_date: Inclusive upper bound of the played-at range

        Returns:
            Outcome of the fetch; on failure the searching flag is restored
        """
        params = self._listing_params()
        searching = False

        if artist:
            searching = True
            params['artist'] = artist

        if title:
            searching = True
            params['song'] = title

        if start_date is not None and end_date is not None:
            searching = True
            params['start'] = to_epoch_ms(start_date)
            params['end'] = to_epoch_ms(end_date)

        url = build_url(self.base_list_url, params) if searching else self.original_url

        previous = self.coordinator.searching
        self.coordinator.searching = searching
        outcome = await self.load_tracks_from_url(url, override_list=True)
        if not outcome.ok:
            self.coordinator.searching = previous
        return outcome

    async def add(
        self,
        title: Optional[str],
        artist: Optional[str],
        group: Optional[str],
        played_at: datetime,
        is_event: bool = False
    ) -> Outcome:
        """
        Add a track (or event) on the server and show it at the head of the collection

        Events are sent with an empty title and the "Event" group.

        Args:
            title: Track title, ignored for events
            artist: Artist name, or the event description
            group: Track group, ignored for events
            played_at: Time the track was played
            is_event: Add an event instead of a song

        Returns:
            Outcome of the request
        """
        body = {
            'title': '' if is_event else (title or ''),
            'artist': artist,
            'group': EVENT_GROUP if is_event else group,
            'time': to_epoch_ms(played_at),
        }

        response, failure = await self._request(
            'tracks/add', f"{self.request_url}/api/tracks/add",
            {'underground': self.underground}, method='POST', json_body=body
        )
        if failure is not None:
            return failure

        try:
            track = Track.from_json(response.json())
        except (ValueError, TrackDecodeError) as e:
            self.logger.error(f"[tracks/add] Malformed track in response: {e}")
            return Outcome.failure(status=response.status, error=f"Malformed track: {e}")

        self.coordinator.insert_at_head(track)
        self.logger.info(f"Added track {track.id}: {track.display_name}")
        return Outcome.success(response.status)

    async def update(
        self,
        track_id: int,
        title: str,
        artist: str,
        group: str,
        played_at: datetime
    ) -> Outcome:
        """
        Edit a track on the server and apply the change locally

        Artist and group are not sent for events. Whether the record is an event
        is taken from the local copy, falling back to the given group when the
        record is not in the collection.

        Args:
            track_id: Id of the track to edit
            title: New title
            artist: New artist (ignored for events)
            group: New group (ignored for events)
            played_at: New played-at time

        Returns:
            Outcome of the request; `inconsistent` is set when the server accepted
            the edit but the track was not present locally
        """
        existing = self.coordinator.find(track_id)
        is_event = existing.is_event if existing is not None else group == EVENT_GROUP

        body: Dict[str, Any] = {'id': track_id, 'title': title}
        if not is_event:
            body['artist'] = artist
            body['group'] = group
        body['time'] = to_epoch_ms(played_at)

        response, failure = await self._request(
            'tracks/update', f"{self.request_url}/api/tracks/update",
            {'underground': self.underground}, method='PATCH', json_body=body
        )
        if failure is not None:
            return failure

        if not self.coordinator.update_in_place(track_id, title, artist, group, played_at):
            self.logger.warning(f"[tracks/update] Edited track {track_id} not found locally")
            return Outcome.success(response.status, inconsistent=True)

        return Outcome.success(response.status)

    async def delete(self, track: Track) -> Outcome:
        """
        Delete a track on the server and remove it from the collection

        Args:
            track: The track to delete, matched locally by id

        Returns:
            Outcome of the request; `inconsistent` is set when the track was
            already absent locally
        """
        response, failure = await self._request(
            'tracks/delete', f"{self.request_url}/api/tracks/delete",
            {'id': track.id, 'underground': self.underground}, method='DELETE'
        )
        if failure is not None:
            return failure

        if not self.coordinator.remove(track.id):
            self.logger.warning(f"[tracks/delete] Deleted track {track.id} not found locally")
            return Outcome.success(response.status, inconsistent=True)

        return Outcome.success(response.status)

    async def get_groups(self) -> List[str]:
        """Group names available for tracks on this client's channel"""
        return await get_groups(self.transport, self.request_url, self.underground)

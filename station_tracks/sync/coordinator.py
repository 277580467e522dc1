"""
Sync coordinator: the single owner of the displayed track collection

Both the pagination client (HTTP pages, CRUD results) and the live stream client
(pushed tracks) write through this object; neither keeps its own copy. The
collection is ordered newest first:

- `replace_all()` installs a fresh listing or search result
- `append_page()` adds an older page to the tail
- `insert_at_head()` / `insert_from_stream()` prepend a new track, refusing duplicates

Track ids are unique within the collection at all times. Pushed tracks can race
an in-flight HTTP add of the same record, so every head insertion checks the id.

While `searching` is set, the collection shows a filtered result, and tracks
arriving from the stream are dropped instead of being mixed into it.

An optional `on_change` observer receives a snapshot of the collection after
every mutation that actually changed it.
"""

from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from ..tracks.models import Track
from ..utils.logger import get_logger

TracksObserver = Callable[[Tuple[Track, ...]], None]


class SyncCoordinator:
    """
    Ordered, id-deduplicated track collection with a searching gate
    """

    def __init__(self, on_change: Optional[TracksObserver] = None):
        """
        Args:
            on_change: Called with the new collection snapshot after each change
        """
        self.logger = get_logger(__name__)
        self.on_change = on_change
        self.searching = False
        self._tracks: List[Track] = []

    @property
    def tracks(self) -> Tuple[Track, ...]:
        """Snapshot of the collection, newest first"""
        return tuple(self._tracks)

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self.tracks)

    def __contains__(self, track_id: object) -> bool:
        return self._index_of(track_id) is not None

    def _index_of(self, track_id: object) -> Optional[int]:
        for index, track in enumerate(self._tracks):
            if track.id == track_id:
                return index
        return None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.tracks)

    def find(self, track_id: int) -> Optional[Track]:
        """Return the record with the given id, if present"""
        index = self._index_of(track_id)
        return self._tracks[index] if index is not None else None

    def replace_all(self, tracks: Iterable[Track]) -> None:
        """Discard the current collection and install a fresh listing"""
        self._tracks = list(tracks)
        self._notify()

    def append_page(self, tracks: Iterable[Track]) -> None:
        """
        Append an older page to the tail, preserving its order

        Pages are disjoint by the server's cursor contract, so no dedup is done here.
        """
        page = list(tracks)
        if not page:
            return
        self._tracks.extend(page)
        self._notify()

    def insert_at_head(self, track: Track) -> bool:
        """
        Prepend a track unless one with the same id is already present

        Returns:
            True if the track was inserted
        """
        if self._index_of(track.id) is not None:
            self.logger.debug(f"Ignoring duplicate track {track.id}")
            return False

        self._tracks.insert(0, track)
        self._notify()
        return True

    def insert_from_stream(self, track: Track) -> bool:
        """
        Prepend a stream-delivered track

        Bypassed entirely while a search result is displayed.

        Returns:
            True if the track was inserted
        """
        if self.searching:
            self.logger.debug(f"Searching, dropping streamed track {track.id}")
            return False
        return self.insert_at_head(track)

    def remove(self, track_id: int) -> bool:
        """
        Remove the record with the given id

        Returns:
            True if a record was removed
        """
        index = self._index_of(track_id)
        if index is None:
            return False

        del self._tracks[index]
        self._notify()
        return True

    def update_in_place(self, track_id: int, title: str, artist: str, group: str, played_at: datetime) -> bool:
        """
        Apply edited fields to the record with the given id, keeping its position

        Events keep their artist (the event description) and group, which the
        server treats as immutable.

        Returns:
            True if a matching record was found
        """
        index = self._index_of(track_id)
        if index is None:
            return False

        existing = self._tracks[index]
        if existing.is_event:
            updated = replace(existing, title=title, played_at=played_at)
        else:
            updated = replace(existing, title=title, artist=artist, group=group, played_at=played_at)

        self._tracks[index] = updated
        self._notify()
        return True

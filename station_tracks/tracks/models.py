"""
Data models for station track records

This module defines the immutable value types exchanged with the station server
and held in the synchronized collection:

- TrackType: whether a record is a played song or a station event
- StreamingService: the streaming services a track may link to
- StreamingLink: per-service link and artwork for a track
- Track: a single played song or event, as listed by the server
- TrackBroadcast: a track pushed over the live stream, plus whether it was requested

All models are built from server JSON through `from_json()` factory methods and
serialized back with `to_json()`. Decoding validates the fields the engine relies
on (`id`, `time`) and raises TrackDecodeError for malformed payloads, while the
`type` and `service` names decode leniently: unknown values fall back to
TrackType.TRACK and StreamingService.SPOTIFY.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..core.exceptions import TrackDecodeError
from ..utils.helpers import format_iso_timestamp, parse_iso_timestamp

# Group name that marks a record as a station event rather than a song
EVENT_GROUP = "Event"


class TrackType(Enum):
    """
    Kind of record in the track log

    Values:
        TRACK: A normal song with artist and title
        EVENT: A station event; the description is held in `artist` and `title` is empty
    """
    TRACK = "track"
    EVENT = "event"

    @classmethod
    def from_name(cls, name: Optional[str]) -> 'TrackType':
        """Resolve a lowercase wire name, defaulting to TRACK for anything unknown"""
        if name == cls.EVENT.value:
            return cls.EVENT
        return cls.TRACK


class StreamingService(Enum):
    """
    Streaming services that may be linked from a track

    Values:
        SPOTIFY: Spotify, resolved by the station's own account
    """
    SPOTIFY = "spotify"

    @classmethod
    def from_name(cls, name: Optional[str]) -> 'StreamingService':
        """Resolve a lowercase wire name, defaulting to SPOTIFY for anything unknown"""
        for service in cls:
            if service.value == name:
                return service
        return cls.SPOTIFY


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TrackDecodeError(f"Field '{key}' must be a string", details={'value': value})
    return value


def _text(data: Dict[str, Any], key: str) -> str:
    return _optional_str(data, key) or ""


@dataclass(frozen=True)
class StreamingLink:
    """
    Data for a track collected from a specific streaming service

    Attributes:
        url: Link to play the track on the service
        artwork_url: Low-resolution album art, meant for icons (well under 100x100)
        service: The service this link belongs to
    """
    url: Optional[str] = None
    artwork_url: Optional[str] = None
    service: StreamingService = StreamingService.SPOTIFY

    @classmethod
    def from_json(cls, data: Any) -> 'StreamingLink':
        """
        Build a StreamingLink from a server `streaming` element

        Raises:
            TrackDecodeError: If the element is not an object or has non-string fields
        """
        if not isinstance(data, dict):
            raise TrackDecodeError("Streaming entry must be an object", details={'value': data})

        return cls(
            url=_optional_str(data, 'link'),
            artwork_url=_optional_str(data, 'artwork'),
            service=StreamingService.from_name(data.get('service')),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            'link': self.url,
            'artwork': self.artwork_url,
            'service': self.service.value,
        }


@dataclass(frozen=True)
class Track:
    """
    A played song or station event, as displayed in the track log

    Attributes:
        id: Server-assigned identifier, unique and stable
        artist: Artist name, or the event description for events
        title: Song title, empty for events
        played_at: Timezone-aware time the track was played
        group: Channel/playlist bucket; "Event" designates an event
        kind: Record type decoded from the server's `type` field
        streaming_links: Links on streaming services that matched the track; services
                         that could not find the track are absent
    """
    id: int
    artist: str
    title: str
    played_at: datetime
    group: str
    kind: TrackType = TrackType.TRACK
    streaming_links: Tuple[StreamingLink, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: Any) -> 'Track':
        """
        Factory method for constructing a Track from server JSON

        Accepts the element shape used by the listing, add and stream endpoints:
        `{id, artist, title, time, group, type, streaming}`. Missing text fields
        decode as empty strings and a missing `streaming` array as no links.

        Args:
            data: Decoded JSON object

        Returns:
            Track instance

        Raises:
            TrackDecodeError: If `id` or `time` is missing or malformed, or a field
                              has the wrong type
        """
        if not isinstance(data, dict):
            raise TrackDecodeError("Track payload must be an object", details={'value': data})

        track_id = data.get('id')
        if isinstance(track_id, bool) or not isinstance(track_id, int):
            raise TrackDecodeError("Track 'id' must be an integer", details={'value': track_id})

        raw_time = data.get('time')
        if not isinstance(raw_time, str):
            raise TrackDecodeError("Track 'time' must be an ISO-8601 string",
                                   details={'id': track_id, 'value': raw_time})
        try:
            played_at = parse_iso_timestamp(raw_time)
        except ValueError as e:
            raise TrackDecodeError(f"Track 'time' is not ISO-8601: {raw_time}",
                                   details={'id': track_id, 'original_error': e}) from e

        streaming = data.get('streaming') or []
        if not isinstance(streaming, list):
            raise TrackDecodeError("Track 'streaming' must be an array",
                                   details={'id': track_id, 'value': streaming})

        return cls(
            id=track_id,
            artist=_text(data, 'artist'),
            title=_text(data, 'title'),
            played_at=played_at,
            group=_text(data, 'group'),
            kind=TrackType.from_name(data.get('type')),
            streaming_links=tuple(StreamingLink.from_json(entry) for entry in streaming),
        )

    @classmethod
    def list_from_json(cls, items: Any) -> List['Track']:
        """Decode a JSON array of tracks, preserving order"""
        if not isinstance(items, list):
            raise TrackDecodeError("Expected an array of tracks", details={'value': items})
        return [cls.from_json(item) for item in items]

    def to_json(self) -> Dict[str, Any]:
        """Serialize to the server's track JSON shape"""
        return {
            'id': self.id,
            'artist': self.artist,
            'title': self.title,
            'time': format_iso_timestamp(self.played_at),
            'group': self.group,
            'type': self.kind.value,
            'streaming': [link.to_json() for link in self.streaming_links],
        }

    @property
    def is_event(self) -> bool:
        """Whether this record is an event, judged by its group"""
        return self.group == EVENT_GROUP

    @property
    def album_art(self) -> Optional[str]:
        """The first available artwork URL across streaming links, if any"""
        for link in self.streaming_links:
            if link.artwork_url:
                return link.artwork_url
        return None

    @property
    def display_name(self) -> str:
        if self.is_event or not self.title:
            return self.artist
        return f"{self.artist} - {self.title}"


@dataclass(frozen=True)
class TrackBroadcast:
    """
    A track pushed over the live stream

    Attributes:
        track: The pushed track
        requested: True if the server sent it in answer to a "current track" request,
                   False for a normal broadcast of a track that just started playing
    """
    track: Track
    requested: bool = False

    @classmethod
    def from_json(cls, data: Any) -> 'TrackBroadcast':
        """
        Decode a stream message

        Both the wrapped form `{"track": {...}, "requested": bool}` and a bare
        track object are accepted.

        Raises:
            TrackDecodeError: If the message does not contain a valid track
        """
        if isinstance(data, dict) and isinstance(data.get('track'), dict):
            return cls(track=Track.from_json(data['track']), requested=bool(data.get('requested', False)))
        return cls(track=Track.from_json(data))

"""Test track data models"""

from datetime import datetime, timezone

import pytest

from conftest import make_track_json
from station_tracks.core.exceptions import TrackDecodeError
from station_tracks.tracks.models import (
    StreamingLink,
    StreamingService,
    Track,
    TrackBroadcast,
    TrackType,
)


class TestTrack:
    """Test Track model"""

    def test_from_json(self, sample_track_data):
        """Test decoding a full track object"""
        track = Track.from_json(sample_track_data)

        assert track.id == 42
        assert track.artist == "Daft Punk"
        assert track.title == "Around the World"
        assert track.group == "Rotation"
        assert track.kind == TrackType.TRACK
        assert track.played_at == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
        assert len(track.streaming_links) == 1
        assert track.streaming_links[0].service == StreamingService.SPOTIFY
        assert not track.is_event

    def test_to_json_matches_server_shape(self, sample_track_data):
        """Test encoding back to the server's field names"""
        track = Track.from_json(sample_track_data)
        assert track.to_json() == sample_track_data
        assert Track.from_json(track.to_json()) == track

    def test_event(self, sample_event_data):
        """Test events are recognised by their group"""
        event = Track.from_json(sample_event_data)

        assert event.is_event
        assert event.kind == TrackType.EVENT
        assert event.title == ""
        assert event.display_name == "Station ID"
        assert Track.from_json(event.to_json()) == event

    def test_lenient_enum_names(self):
        """Test unknown type and service names fall back to defaults"""
        data = make_track_json(1, kind="jingle", streaming=[{'link': None, 'artwork': None, 'service': 'tidal'}])
        track = Track.from_json(data)

        assert track.kind == TrackType.TRACK
        assert track.streaming_links[0].service == StreamingService.SPOTIFY

    def test_missing_optional_fields(self):
        """Test absent text fields and streaming array"""
        track = Track.from_json({'id': 7, 'time': '2024-03-01T12:00:00+01:00'})

        assert track.artist == ""
        assert track.title == ""
        assert track.group == ""
        assert track.streaming_links == ()
        assert track.played_at == datetime(2024, 3, 1, 11, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("data", [
        None,
        [],
        {'time': '2024-03-01T12:00:00Z'},
        {'id': '5', 'time': '2024-03-01T12:00:00Z'},
        {'id': True, 'time': '2024-03-01T12:00:00Z'},
        {'id': 5},
        {'id': 5, 'time': 'yesterday'},
        {'id': 5, 'time': '2024-03-01T12:00:00Z', 'artist': 12},
        {'id': 5, 'time': '2024-03-01T12:00:00Z', 'streaming': 'spotify'},
        {'id': 5, 'time': '2024-03-01T12:00:00Z', 'streaming': ['spotify']},
    ])
    def test_malformed_payloads(self, data):
        """Test decode errors for payloads the engine cannot use"""
        with pytest.raises(TrackDecodeError):
            Track.from_json(data)

    def test_list_from_json(self):
        """Test list decoding keeps server order"""
        tracks = Track.list_from_json([make_track_json(3), make_track_json(2), make_track_json(1)])
        assert [t.id for t in tracks] == [3, 2, 1]

        with pytest.raises(TrackDecodeError):
            Track.list_from_json({'tracks': []})

    def test_list_with_high_precision_times(self):
        """Test a page mixing timestamp precisions decodes completely"""
        tracks = Track.list_from_json([
            make_track_json(2, time="2024-03-01T12:00:00.123456789Z"),
            make_track_json(1, time="2024-03-01T11:59:00.5Z"),
        ])
        assert [t.played_at.microsecond for t in tracks] == [123456, 500000]

    def test_album_art(self):
        """Test album art picks the first link with artwork"""
        data = make_track_json(1, streaming=[
            {'link': 'https://a', 'artwork': None, 'service': 'spotify'},
            {'link': 'https://b', 'artwork': 'https://art', 'service': 'spotify'},
        ])
        assert Track.from_json(data).album_art == 'https://art'
        assert Track.from_json(make_track_json(2)).album_art is None

    def test_display_name(self, sample_track_data):
        assert Track.from_json(sample_track_data).display_name == "Daft Punk - Around the World"


class TestStreamingLink:
    """Test StreamingLink model"""

    def test_round_trip(self):
        link = StreamingLink.from_json({'link': 'https://x', 'artwork': 'https://y', 'service': 'spotify'})
        assert link.url == 'https://x'
        assert link.artwork_url == 'https://y'
        assert link.to_json() == {'link': 'https://x', 'artwork': 'https://y', 'service': 'spotify'}

    def test_not_an_object(self):
        with pytest.raises(TrackDecodeError):
            StreamingLink.from_json("https://x")


class TestTrackBroadcast:
    """Test stream message decoding"""

    def test_wrapped_message(self, sample_track_data):
        """Test the track/requested wrapper"""
        broadcast = TrackBroadcast.from_json({'track': sample_track_data, 'requested': True})
        assert broadcast.track.id == 42
        assert broadcast.requested is True

    def test_bare_track(self, sample_track_data):
        """Test a bare track object counts as an unrequested broadcast"""
        broadcast = TrackBroadcast.from_json(sample_track_data)
        assert broadcast.track.id == 42
        assert broadcast.requested is False

    def test_malformed(self):
        with pytest.raises(TrackDecodeError):
            TrackBroadcast.from_json({'heartbeat': ''})

# tests/test_helpers.py
"""Test utilities and helpers"""

from datetime import datetime, timedelta, timezone

import pytest

from station_tracks.core.outcome import Outcome
from station_tracks.utils.helpers import (
    build_url,
    format_iso_timestamp,
    format_query_value,
    is_valid_url,
    parse_iso_timestamp,
    to_epoch_ms,
    truncate_string,
)
from station_tracks.utils.logger import get_logger, parse_size, setup_logging


class TestHelpers:
    """Test helper functions"""

    def test_is_valid_url(self):
        """Test URL validation with and without scheme restrictions"""
        assert is_valid_url("http://station.test")
        assert is_valid_url("wss://station.test/stream", schemes=('ws', 'wss'))
        assert not is_valid_url("http://station.test", schemes=('ws', 'wss'))
        assert not is_valid_url("station.test")
        assert not is_valid_url("")

    def test_format_query_value(self):
        assert format_query_value(True) == 'true'
        assert format_query_value(False) == 'false'
        assert format_query_value(25) == '25'

    def test_build_url(self):
        """Test query strings keep order and skip None values"""
        assert build_url("http://s/api", {'count': 25, 'underground': False}) == \
            "http://s/api?count=25&underground=false"
        assert build_url("http://s/api", {'artist': 'AC/DC & Co', 'song': None}) == \
            "http://s/api?artist=AC%2FDC+%26+Co"
        assert build_url("http://s/api", {}) == "http://s/api"
        assert build_url("http://s/api", {'x': None}) == "http://s/api"

    def test_to_epoch_ms(self):
        assert to_epoch_ms(datetime(1970, 1, 1, tzinfo=timezone.utc)) == 0
        assert to_epoch_ms(datetime(1970, 1, 1, 0, 0, 1)) == 1000
        plus_one = timezone(timedelta(hours=1))
        assert to_epoch_ms(datetime(1970, 1, 1, 1, 0, tzinfo=plus_one)) == 0

    def test_parse_iso_timestamp(self):
        """Test 'Z' suffixes and naive timestamps come back as UTC"""
        expected = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert parse_iso_timestamp("2024-03-01T12:00:00Z") == expected
        assert parse_iso_timestamp("2024-03-01T12:00:00") == expected
        assert parse_iso_timestamp("2024-03-01T13:00:00+01:00") == expected
        with pytest.raises(ValueError):
            parse_iso_timestamp("not a time")

    @pytest.mark.parametrize("text,microsecond", [
        ("2024-03-01T12:00:00.5Z", 500000),
        ("2024-03-01T12:00:00.25Z", 250000),
        ("2024-03-01T12:00:00.123Z", 123000),
        ("2024-03-01T12:00:00.123456789Z", 123456),
        ("2024-03-01T12:00:00.5+0000", 500000),
    ])
    def test_parse_iso_timestamp_fractions(self, text, microsecond):
        """Test fractional seconds of any length and basic offsets"""
        assert parse_iso_timestamp(text) == datetime(2024, 3, 1, 12, 0, 0, microsecond, tzinfo=timezone.utc)

    def test_format_iso_timestamp(self):
        assert format_iso_timestamp(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)) == "2024-03-01T12:00:00Z"
        plus_one = timezone(timedelta(hours=1))
        assert format_iso_timestamp(datetime(2024, 3, 1, 13, 0, tzinfo=plus_one)) == "2024-03-01T13:00:00+01:00"

    def test_truncate_string(self):
        assert truncate_string("short", 10) == "short"
        assert truncate_string("a" * 20, 10) == "aaaaaaa..."

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 * 1024
        assert parse_size("512KB") == 512 * 1024


class TestOutcome:
    """Test operation outcome values"""

    def test_success(self):
        outcome = Outcome.success()
        assert outcome
        assert outcome.status == 200
        assert not outcome.inconsistent

    def test_failure(self):
        outcome = Outcome.failure(status=502, error="bad gateway")
        assert not outcome
        assert outcome.is_server_error
        assert not Outcome.failure(status=404).is_server_error
        assert not Outcome.failure(error="refused").is_server_error


class TestLogging:
    """Test logging setup"""

    def test_file_output(self, temp_dir):
        """Test records at or above the level reach the rotating log file"""
        log_file = temp_dir / "logs" / "station.log"
        setup_logging(level="INFO", log_file=str(log_file), console_output=False)

        logger = get_logger('station_tracks.test')
        logger.debug("hidden detail")
        logger.info("track list loaded")
        setup_logging(console_output=False)

        content = log_file.read_text(encoding='utf-8')
        assert "track list loaded" in content
        assert "hidden detail" not in content

    def test_verbose_console(self, capsys):
        setup_logging(colored_output=False)
        get_logger('station_tracks.test').info("quiet record")
        assert "quiet record" not in capsys.readouterr().out

        setup_logging(colored_output=False, verbose=True)
        get_logger('station_tracks.test').debug("debug record")
        setup_logging(console_output=False)

        assert "DEBUG station_tracks.test: debug record" in capsys.readouterr().out

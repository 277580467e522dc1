"""
Exception classes for station-tracks.

This module defines the custom exceptions used throughout the package.
Each exception carries a human-readable message plus an optional details
dictionary, so callers can log context without parsing strings.

Exception Hierarchy:
    StationTracksError (base)
        ConfigError - Configuration file or value issues
        TransportError - Network and socket failures
            StreamConnectionError - Live stream could not be opened
        TrackDecodeError - Malformed track payloads from the server

Server-rejected HTTP requests are NOT exceptions: the pagination client
converts them into an Outcome value (see core/outcome.py).
"""


class StationTracksError(Exception):
    """
    Base exception for all station-tracks errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch every station-tracks error with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., URL, status).
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(StationTracksError):
    """
    Raised when there's an issue with the configuration.

    Common causes:
        - config.yaml has invalid YAML syntax
        - Server URL is not an absolute http(s) URL
        - Non-positive page size or timer intervals
    """
    pass


class TransportError(StationTracksError):
    """
    Raised when a request or socket fails below the HTTP status level.

    Covers unreachable hosts, refused connections, resets and socket errors.
    A response with a non-200 status is not a transport error.
    """
    pass


class StreamConnectionError(TransportError):
    """
    Raised when the live track stream cannot be opened.

    Example:
        raise StreamConnectionError(
            "Failed to open track stream",
            details={'url': 'ws://station/api/tracks/stream?underground=false'}
        )
    """
    pass


class TrackDecodeError(StationTracksError):
    """
    Raised when a track payload is missing required fields or has the wrong shape.

    Unknown `type` and `service` values are NOT decode errors; they fall back
    to the default variants.
    """
    pass

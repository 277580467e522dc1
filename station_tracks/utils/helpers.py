"""
Utility helpers for Station Tracks
Query-string building, timestamp conversion and display formatting
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Union
from urllib.parse import urlencode, urlparse


def is_valid_url(url: str, schemes: Optional[Iterable[str]] = None) -> bool:
    """
    Check if string is a valid absolute URL

    Args:
        url: URL string to validate
        schemes: Allowed schemes, any scheme when None

    Returns:
        True if valid URL
    """
    try:
        result = urlparse(url)
    except (TypeError, ValueError):
        return False

    if not (result.scheme and result.netloc):
        return False
    return schemes is None or result.scheme in schemes


def format_query_value(value: Any) -> str:
    """Render a query parameter the way the station server expects (lowercase booleans)"""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def build_url(absolute_path: str, params: Optional[Dict[str, Any]] = None) -> str:
    """
    Append encoded query parameters to a path

    Args:
        absolute_path: URL without query string
        params: Ordered query parameters; None values are skipped

    Returns:
        The path with `?query` appended, or unchanged when there are no parameters
    """
    if not params:
        return absolute_path

    query = urlencode([(key, format_query_value(value)) for key, value in params.items()
                       if value is not None])
    if not query:
        return absolute_path
    return f"{absolute_path}?{query}"


def to_epoch_ms(moment: datetime) -> int:
    """
    Convert a datetime to epoch milliseconds

    Naive datetimes are interpreted as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def parse_iso_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp

    Accepts a trailing 'Z', basic offsets such as '+0000' and any number of
    fractional-second digits (truncated to microseconds). Naive results are
    assumed to be UTC.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_iso_timestamp(moment: datetime) -> str:
    """Render a datetime as ISO-8601, using 'Z' for UTC"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.isoformat()
    if text.endswith('+00:00'):
        text = text[:-6] + 'Z'
    return text


def format_timestamp(timestamp: Union[str, datetime]) -> str:
    """
    Format timestamp for display in local time

    Args:
        timestamp: Timestamp string or datetime object

    Returns:
        Formatted timestamp string
    """
    if isinstance(timestamp, str):
        try:
            dt = parse_iso_timestamp(timestamp)
        except ValueError:
            return timestamp
    else:
        dt = timestamp

    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime('%Y-%m-%d %H:%M:%S')


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to append when truncated

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix

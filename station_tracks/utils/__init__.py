"""
Utilities package
Logging setup and small query/time helpers
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    parse_size,
)
from .helpers import (
    is_valid_url,
    build_url,
    format_query_value,
    to_epoch_ms,
    parse_iso_timestamp,
    format_iso_timestamp,
    format_timestamp,
    truncate_string,
)

__all__ = [
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'parse_size',
    'is_valid_url',
    'build_url',
    'format_query_value',
    'to_epoch_ms',
    'parse_iso_timestamp',
    'format_iso_timestamp',
    'format_timestamp',
    'truncate_string',
]

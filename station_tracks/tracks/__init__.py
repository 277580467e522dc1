"""
Tracks package: track models, the paginated listing/CRUD client and group listing
"""

from .models import (
    EVENT_GROUP,
    TrackType,
    StreamingService,
    StreamingLink,
    Track,
    TrackBroadcast,
)
from .groups import get_groups
from .pagination import PaginationClient

__all__ = [
    'EVENT_GROUP',
    'TrackType',
    'StreamingService',
    'StreamingLink',
    'Track',
    'TrackBroadcast',
    'get_groups',
    'PaginationClient',
]

"""
Group listing for the station server
"""

from typing import List

from ..core.exceptions import TransportError
from ..transport.http import HttpTransport
from ..utils.logger import get_logger

logger = get_logger(__name__)


async def get_groups(transport: HttpTransport, request_url: str, underground: bool) -> List[str]:
    """
    Get the groups available for tracks

    Args:
        transport: HTTP transport to send the request with
        request_url: Base URL of the station server
        underground: List groups of the underground playlist instead of FM

    Returns:
        Group names in server order; an empty list on any failure
    """
    url = f"{request_url.rstrip('/')}/api/groups/list"
    try:
        response = await transport.fetch_url(url, {'underground': underground})
    except TransportError as e:
        logger.error(f"[groups/list] Request failed: {e}")
        return []

    if response.status != 200:
        logger.error(f"[groups/list] Erroneous status of {response.status}: {response.body}")
        return []

    try:
        groups = response.json()
    except ValueError as e:
        logger.error(f"[groups/list] Malformed response: {e}")
        return []

    if not isinstance(groups, list) or not all(isinstance(group, str) for group in groups):
        logger.error(f"[groups/list] Expected a list of names, got: {response.body}")
        return []

    return groups

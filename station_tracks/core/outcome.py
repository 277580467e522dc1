"""
Operation outcome values

Every pagination client operation reports its result as an Outcome instead of
raising, so a failed fetch or a rejected edit can never escape into the caller's
event loop. The collection is untouched whenever `ok` is False.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Outcome:
    """
    Result of a single HTTP-backed operation

    Attributes:
        ok: True when the server accepted the request and the collection was updated
        status: HTTP status code, or None when the request never got a response
        error: Raw error body from the server or the transport error message
        inconsistent: True when the server accepted the change but the referenced
                      record was not present locally
    """
    ok: bool
    status: Optional[int] = None
    error: Optional[str] = None
    inconsistent: bool = False

    @classmethod
    def success(cls, status: Optional[int] = 200, inconsistent: bool = False) -> 'Outcome':
        return cls(ok=True, status=status, inconsistent=inconsistent)

    @classmethod
    def failure(cls, status: Optional[int] = None, error: Optional[str] = None) -> 'Outcome':
        return cls(ok=False, status=status, error=error)

    @property
    def is_server_error(self) -> bool:
        """Whether the status is within [500, 599]"""
        return self.status is not None and 500 <= self.status < 600

    def __bool__(self) -> bool:
        return self.ok

"""
Pager Models
============
Value objects passed between the requester and the pagination driver.
"""

from dataclasses import dataclass, replace
from typing import Any, List, Optional
from urllib.parse import quote

# A page is whatever list the endpoint returned; records carry a ``tid``.
Page = List[Any]

CURSOR_PARAM = "tid"


@dataclass(frozen=True)
class RequestSpec:
    """What to fetch and where to resume from."""
    url: str
    page: Optional[Any] = None

    def with_page(self, page: Any) -> "RequestSpec":
        """Derive a spec pointing at the next cursor."""
        return replace(self, page=page)

    def to_url(self) -> str:
        """Render the target URL with the cursor as a query parameter."""
        if self.page is None:
            return self.url
        separator = "&" if "?" in self.url else "?"
        return f"{self.url}{separator}{CURSOR_PARAM}={quote(str(self.page), safe='')}"


@dataclass(frozen=True)
class RetryContext:
    """
    Attempt counter handed to each try of a single logical request.

    ``retries`` numbers the attempt in progress, the first one being 1.
    0 means no attempt has been made yet and is read as 1.
    A new context is derived per retry; instances are never mutated.
    """
    retries: int = 1

    def __post_init__(self):
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")
        if self.retries == 0:
            object.__setattr__(self, "retries", 1)

    def next(self) -> "RetryContext":
        return replace(self, retries=self.retries + 1)


@dataclass(frozen=True)
class TransportRequest:
    """Request shape handed to the transport."""
    url: str
    method: str = "get"
    timeout: float = 1000  # milliseconds

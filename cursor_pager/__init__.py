"""
Cursor Pager
============
Fetch cursor-paginated JSON endpoints with per-request retry and timeout.
"""

__version__ = "0.1.0"

# Configuration
from cursor_pager.config import RequesterConfig, PaginationConfig

# Models
from cursor_pager.models import Page, RequestSpec, RetryContext, TransportRequest

# Errors
from cursor_pager.exceptions import PagerError, PageFormatError, CursorError
from cursor_pager.http import (
    Request,
    TransportError,
    TransportConnectionError,
    TransportStatusError,
    TransportDecodeError,
    RequestTimeoutError,
)

# Core
from cursor_pager.timing import sleep
from cursor_pager.requester import RetryingRequester
from cursor_pager.pagination import PaginationDriver

# Logging
from cursor_pager.log import setup_logging

__all__ = [
    # Configuration
    "RequesterConfig",
    "PaginationConfig",
    # Models
    "Page",
    "RequestSpec",
    "RetryContext",
    "TransportRequest",
    # Errors
    "PagerError",
    "PageFormatError",
    "CursorError",
    "TransportError",
    "TransportConnectionError",
    "TransportStatusError",
    "TransportDecodeError",
    "RequestTimeoutError",
    # Core
    "Request",
    "sleep",
    "RetryingRequester",
    "PaginationDriver",
    # Logging
    "setup_logging",
]

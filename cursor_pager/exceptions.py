"""
Pager Exceptions
================
Base exception and pagination-level failures.
"""

from typing import Any, Optional


class PagerError(Exception):
    """Base exception for everything raised by cursor_pager."""
    pass


class PageFormatError(PagerError):
    """Raised when a response body cannot be read as a page of records."""

    def __init__(self, message: str, url: Optional[str] = None, details: Any = None):
        self.message = message
        self.url = url
        self.details = details
        super().__init__(f"{message} (url: {url})" if url else message)


class CursorError(PagerError):
    """Raised when the trailing record of a page carries no cursor."""

    def __init__(self, record: Any, field: str = "tid"):
        self.record = record
        self.field = field
        super().__init__(f"Record has no '{field}' to advance the cursor: {record!r}")

from typing import Optional, Any

from cursor_pager.exceptions import PagerError


class TransportError(PagerError):
    """Base exception for failures surfaced by the HTTP transport."""
    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.url = url
        self.status_code = status_code
        self.details = details
        super().__init__(f"[{url}] {message} (Status: {status_code})")

class TransportConnectionError(TransportError):
    """Raised when the target could not be reached or the connection dropped."""
    pass

class TransportStatusError(TransportError):
    """Raised when the server answers with a 4xx/5xx status."""
    pass

class TransportDecodeError(TransportError):
    """Raised when the response body is not valid JSON."""
    pass

class RequestTimeoutError(PagerError):
    """Raised when a single attempt does not settle before its deadline."""
    def __init__(self, url: str, timeout_ms: Optional[float] = None):
        self.url = url
        self.timeout_ms = timeout_ms
        super().__init__(f"timeout at [{url}]")

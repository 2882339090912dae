from .request import Request
from .exceptions import (
    TransportError,
    TransportConnectionError,
    TransportStatusError,
    TransportDecodeError,
    RequestTimeoutError,
)

__all__ = [
    "Request",
    "TransportError",
    "TransportConnectionError",
    "TransportStatusError",
    "TransportDecodeError",
    "RequestTimeoutError",
]

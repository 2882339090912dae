"""
HTTP Request
============
JSON GET transport and the timeout race applied to each attempt.
"""

import asyncio
import json
from typing import Any, Optional, Set

import httpx
import structlog

from cursor_pager.models import TransportRequest
from .exceptions import (
    RequestTimeoutError,
    TransportConnectionError,
    TransportDecodeError,
    TransportStatusError,
)

logger = structlog.get_logger(__name__)

SUPPORTED_METHODS = ("get",)


class Request:
    """
    Issues a single JSON GET and races it against a deadline.

    A fresh ``httpx.AsyncClient`` is opened per call; nothing is pooled
    or kept between requests.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        user_agent: str = "cursor-pager",
    ):
        self.timeout = timeout
        self._transport = transport
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "application/json",
        }
        # calls that lost the race, held until they settle
        self._late: Set["asyncio.Future[Any]"] = set()

    def _discard(self, task: "asyncio.Future[Any]") -> None:
        """Drop a call that already lost the race once it settles."""
        self._late.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("late_request_failed", error=str(exc))

    async def get(self, url: str) -> Any:
        """Fetch ``url``, accumulate the streamed body and parse it as JSON."""
        buffer = bytearray()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    async for chunk in response.aiter_bytes():
                        buffer.extend(chunk)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransportStatusError(f"HTTP {status} Error", url=url, status_code=status) from e
        except httpx.HTTPError as e:
            raise TransportConnectionError(f"Failed to fetch: {e}", url=url) from e

        try:
            return json.loads(buffer)
        except ValueError as e:
            raise TransportDecodeError(
                "Response body is not valid JSON",
                url=url,
                details=bytes(buffer[:200]),
            ) from e

    async def make_request(self, request: TransportRequest) -> Any:
        """
        Run the transport call for ``request`` against its deadline.

        Whichever settles first wins. On timeout the transport call is left
        running and its eventual result or error is discarded.

        Raises:
            RequestTimeoutError: If the deadline passes first
            TransportError: Whatever the transport raised
        """
        method = request.method.lower()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported method: {request.method}")

        call = asyncio.ensure_future(getattr(self, method)(request.url))
        done, _ = await asyncio.wait({call}, timeout=request.timeout / 1000)

        if call in done:
            return call.result()

        self._late.add(call)
        call.add_done_callback(self._discard)
        logger.warning("request_timeout", url=request.url, timeout_ms=request.timeout)
        raise RequestTimeoutError(request.url, request.timeout)

"""
Retrying Requester
==================
One logical fetch: each attempt is raced against a deadline, failed
attempts are retried after a fixed delay until the budget is spent.
"""

from typing import Any, Awaitable, Callable, Optional

import structlog
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_fixed

from . import timing
from .config import RequesterConfig
from .http import Request
from .models import Page, RequestSpec, RetryContext, TransportRequest

logger = structlog.get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class RetryingRequester:
    """
    Fetches a single page, masking transient failures.

    ``max_retries`` is the total number of attempts. The first attempt runs
    with ``RetryContext(retries=1)`` and the last one with
    ``retries == max_retries``, after which the last error is re-raised
    unchanged. A budget of 0 still makes the initial attempt.

    Example:
        requester = RetryingRequester(RequesterConfig(max_retries=2))
        page = await requester.handle_request(RequestSpec(url, page="42"))
    """

    def __init__(
        self,
        config: Optional[RequesterConfig] = None,
        request: Optional[Request] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        self.config = config or RequesterConfig()
        self.request = request or Request()
        self.sleep = sleep or timing.sleep

    def build_request(self, spec: RequestSpec) -> TransportRequest:
        return TransportRequest(
            url=spec.to_url(),
            method="get",
            timeout=self.config.max_request_timeout_ms,
        )

    async def _attempt(self, spec: RequestSpec, context: RetryContext) -> Page:
        """Run one try. Patched in tests to observe every attempt."""
        return await self.request.make_request(self.build_request(spec))

    async def handle_request(
        self,
        spec: RequestSpec,
        context: Optional[RetryContext] = None,
    ) -> Page:
        """
        Fetch ``spec`` with retries.

        Args:
            spec: URL and cursor to fetch
            context: Attempt counter to resume from; a fresh one by default

        Returns:
            The parsed page exactly as the transport returned it

        Raises:
            RequestTimeoutError: If the last attempt timed out
            TransportError: If the last attempt failed in the transport
            ValueError: If ``context`` is already past the budget
        """
        context = context or RetryContext()
        url = spec.to_url()
        # the initial attempt always runs, even with a budget of 0
        if context.retries > max(1, self.config.max_retries):
            raise ValueError(
                f"retries {context.retries} exceeds max_retries {self.config.max_retries}"
            )
        remaining = max(1, self.config.max_retries - context.retries + 1)

        def log_retry(retry_state: RetryCallState) -> None:
            logger.warning(
                "request_retry",
                url=url,
                attempt=context.retries + retry_state.attempt_number - 1,
                max_retries=self.config.max_retries,
                delay_ms=retry_state.next_action.sleep if retry_state.next_action else None,
                error=str(retry_state.outcome.exception()),
            )

        # wait values are milliseconds and go to self.sleep untouched
        retrying = AsyncRetrying(
            stop=stop_after_attempt(remaining),
            wait=wait_fixed(self.config.retry_timeout_ms),
            sleep=self.sleep,
            before_sleep=log_retry,
            reraise=True,
        )

        result: Any = None
        current = context
        try:
            async for attempt in retrying:
                if attempt.retry_state.attempt_number > 1:
                    current = current.next()
                with attempt:
                    result = await self._attempt(spec, current)
        except Exception as e:
            logger.error(
                "request_failed",
                url=url,
                attempts=current.retries,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        return result

"""
Tests for the Retrying Requester
================================
Retry budget, sleep between attempts and request shape.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from cursor_pager.config import RequesterConfig
from cursor_pager.http import Request, RequestTimeoutError, TransportConnectionError
from cursor_pager.models import RequestSpec, RetryContext, TransportRequest
from cursor_pager.requester import RetryingRequester

URL = "https://testing.com"


def make_requester(config=None, **make_request_kwargs):
    request = MagicMock(spec=Request)
    request.make_request = AsyncMock(**make_request_kwargs)
    sleep = AsyncMock()
    requester = RetryingRequester(config or RequesterConfig(), request=request, sleep=sleep)
    return requester, request, sleep


class TestRetryingRequester:
    """Tests for handle_request."""

    @pytest.mark.asyncio
    async def test_retries_until_budget_then_raises(self):
        """Should make exactly max_retries attempts and re-raise the original error."""
        error = TransportConnectionError("connection reset", url=URL)
        requester, request, sleep = make_requester(
            RequesterConfig(max_retries=2),
            side_effect=error,
        )

        with patch.object(requester, "_attempt", wraps=requester._attempt) as attempt:
            with pytest.raises(TransportConnectionError) as exc_info:
                await requester.handle_request(RequestSpec(url=URL, page=1))

        assert exc_info.value is error
        assert attempt.await_count == 2
        assert [c.args[1].retries for c in attempt.await_args_list] == [1, 2]
        assert all(c.args[0] == RequestSpec(url=URL, page=1) for c in attempt.await_args_list)
        assert request.make_request.await_count == 2
        assert sleep.await_args_list == [call(1000)]

    @pytest.mark.asyncio
    async def test_default_budget_is_four_attempts(self):
        """Default config should try four times."""
        requester, request, sleep = make_requester(side_effect=TransportConnectionError("down"))

        with pytest.raises(TransportConnectionError):
            await requester.handle_request(RequestSpec(url=URL))

        assert request.make_request.await_count == 4
        assert sleep.await_count == 3

    @pytest.mark.asyncio
    async def test_first_attempt_success(self):
        """Should return the page unchanged with no retry and no sleep."""
        page = [{"tid": 1}, {"tid": 2}]
        requester, request, sleep = make_requester(return_value=page)

        with patch.object(requester, "_attempt", wraps=requester._attempt) as attempt:
            result = await requester.handle_request(RequestSpec(url=URL, page=0))

        assert result is page
        assert [c.args[1] for c in attempt.await_args_list] == [RetryContext(retries=1)]
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self):
        """Failures within the budget should be invisible to the caller."""
        page = [{"tid": "a"}]
        requester, request, sleep = make_requester(
            RequesterConfig(max_retries=4, retry_timeout_ms=250),
            side_effect=[RequestTimeoutError(URL), TransportConnectionError("reset"), page],
        )

        result = await requester.handle_request(RequestSpec(url=URL))

        assert result == page
        assert request.make_request.await_count == 3
        assert sleep.await_args_list == [call(250), call(250)]

    @pytest.mark.asyncio
    async def test_zero_budget_makes_single_attempt(self):
        """A budget of 0 still runs the initial attempt."""
        requester, request, sleep = make_requester(
            RequesterConfig(max_retries=0),
            side_effect=RequestTimeoutError(URL),
        )

        with pytest.raises(RequestTimeoutError):
            await requester.handle_request(RequestSpec(url=URL))

        assert request.make_request.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resumes_from_given_context(self):
        """An explicit context counts towards the budget."""
        requester, request, sleep = make_requester(
            RequesterConfig(max_retries=3),
            side_effect=TransportConnectionError("down"),
        )

        with patch.object(requester, "_attempt", wraps=requester._attempt) as attempt:
            with pytest.raises(TransportConnectionError):
                await requester.handle_request(RequestSpec(url=URL), RetryContext(retries=2))

        assert [c.args[1].retries for c in attempt.await_args_list] == [2, 3]

    @pytest.mark.asyncio
    async def test_zero_context_counts_as_first_attempt(self):
        """A context at 0 still gets exactly max_retries attempts."""
        requester, request, sleep = make_requester(side_effect=TransportConnectionError("down"))

        with patch.object(requester, "_attempt", wraps=requester._attempt) as attempt:
            with pytest.raises(TransportConnectionError):
                await requester.handle_request(RequestSpec(url=URL), RetryContext(retries=0))

        assert [c.args[1].retries for c in attempt.await_args_list] == [1, 2, 3, 4]
        assert request.make_request.await_count == 4

    @pytest.mark.asyncio
    async def test_context_past_budget_is_rejected(self):
        """A context beyond max_retries must not trigger another attempt."""
        requester, request, sleep = make_requester(return_value=[{"tid": 1}])

        with pytest.raises(ValueError):
            await requester.handle_request(RequestSpec(url=URL), RetryContext(retries=6))

        request.make_request.assert_not_awaited()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_context_at_budget_makes_one_attempt(self):
        requester, request, sleep = make_requester(
            RequesterConfig(max_retries=4),
            side_effect=TransportConnectionError("down"),
        )

        with patch.object(requester, "_attempt", wraps=requester._attempt) as attempt:
            with pytest.raises(TransportConnectionError):
                await requester.handle_request(RequestSpec(url=URL), RetryContext(retries=4))

        assert [c.args[1].retries for c in attempt.await_args_list] == [4]
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_builds_get_request_with_cursor(self):
        """Should send a GET for url?tid=<page> with the per-attempt deadline."""
        requester, request, sleep = make_requester(
            RequesterConfig(max_request_timeout_ms=750),
            return_value=[],
        )

        await requester.handle_request(RequestSpec(url=URL, page=10))

        request.make_request.assert_awaited_once_with(
            TransportRequest(url=f"{URL}?tid=10", method="get", timeout=750)
        )

    @pytest.mark.asyncio
    async def test_times_out_each_attempt(self):
        """Slow attempts should time out, be retried, and surface the timeout."""
        request = Request()
        sleep = AsyncMock()
        requester = RetryingRequester(
            RequesterConfig(max_retries=2, max_request_timeout_ms=10),
            request=request,
            sleep=sleep,
        )

        async def slow(url):
            await asyncio.sleep(0.03)
            return [{"tid": 1}]

        with patch.object(request, "get", side_effect=slow) as get:
            with pytest.raises(RequestTimeoutError) as exc_info:
                await requester.handle_request(RequestSpec(url=URL, page=5))
            await asyncio.sleep(0.05)

        assert f"{URL}?tid=5" in str(exc_info.value)
        assert get.await_count == 2
        assert sleep.await_count == 1

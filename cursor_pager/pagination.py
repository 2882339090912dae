"""
Pagination Driver
=================
Lazy, cursor-advancing stream of pages on top of the retrying requester.

Usage:
    from cursor_pager import PaginationDriver, RequestSpec

    driver = PaginationDriver()
    async for page in driver.get_paginated(RequestSpec("https://api.example.com/items")):
        ...
"""

from collections.abc import Mapping
from typing import Any, AsyncIterator, List, Optional, Type

import structlog
from pydantic import BaseModel, ValidationError

from . import timing
from .config import PaginationConfig
from .exceptions import CursorError, PageFormatError
from .models import CURSOR_PARAM, Page, RequestSpec
from .requester import RetryingRequester, SleepFunc

logger = structlog.get_logger(__name__)


class PaginationDriver:
    """
    Pulls pages one at a time, advancing the cursor to the ``tid`` of the
    last record of each page.

    The stream ends cleanly on an empty page. Errors that outlive the retry
    budget are raised from the iterator. Nothing is cached: iterating again
    means calling ``get_paginated`` again with the initial spec.
    """

    def __init__(
        self,
        config: Optional[PaginationConfig] = None,
        requester: Optional[RetryingRequester] = None,
        sleep: Optional[SleepFunc] = None,
        record_model: Optional[Type[BaseModel]] = None,
    ):
        self.config = config or PaginationConfig()
        self.sleep = sleep or timing.sleep
        self.requester = requester or RetryingRequester(self.config, sleep=self.sleep)
        self.record_model = record_model

    def _to_page(self, raw: Any, spec: RequestSpec) -> Page:
        if not isinstance(raw, list):
            raise PageFormatError(
                f"Expected a list of records, got {type(raw).__name__}",
                url=spec.to_url(),
            )
        if self.record_model is None:
            return raw
        try:
            return [self.record_model.model_validate(item) for item in raw]
        except ValidationError as e:
            raise PageFormatError("Record failed validation", url=spec.to_url(), details=e.errors()) from e

    @staticmethod
    def _cursor_of(record: Any) -> Any:
        if isinstance(record, Mapping):
            if CURSOR_PARAM not in record:
                raise CursorError(record, CURSOR_PARAM)
            return record[CURSOR_PARAM]
        if not hasattr(record, CURSOR_PARAM):
            raise CursorError(record, CURSOR_PARAM)
        return getattr(record, CURSOR_PARAM)

    async def get_paginated(
        self,
        spec: RequestSpec,
        max_pages: Optional[int] = None,
    ) -> AsyncIterator[Page]:
        """
        Yield pages starting at ``spec`` until an empty page comes back.

        Args:
            spec: Initial URL and cursor
            max_pages: Stop after this many pages (no limit by default)
        """
        if max_pages is not None and max_pages < 0:
            raise ValueError("max_pages must be >= 0")

        fetched = 0
        while max_pages is None or fetched < max_pages:
            page = self._to_page(await self.requester.handle_request(spec), spec)

            if not page:
                logger.info("pagination_exhausted", url=spec.url, pages=fetched)
                return

            fetched += 1
            logger.debug("page_fetched", url=spec.url, cursor=spec.page, records=len(page), page=fetched)
            yield page

            if max_pages is not None and fetched >= max_pages:
                logger.info("pagination_limit_reached", url=spec.url, pages=fetched)
                return

            await self.sleep(self.config.threshold_ms)
            spec = spec.with_page(self._cursor_of(page[-1]))

    async def iter_records(
        self,
        spec: RequestSpec,
        max_pages: Optional[int] = None,
    ) -> AsyncIterator[Any]:
        """Flatten the page stream into individual records."""
        async for page in self.get_paginated(spec, max_pages=max_pages):
            for record in page:
                yield record

    async def collect(self, spec: RequestSpec, max_pages: Optional[int] = None) -> List[Page]:
        """Fetch every page into a list. Only for sources known to end."""
        return [page async for page in self.get_paginated(spec, max_pages=max_pages)]

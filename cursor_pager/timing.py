"""Millisecond sleep used between retries and between pages."""

import asyncio


async def sleep(ms: float) -> None:
    """Resolve with no value once ``ms`` milliseconds have elapsed."""
    await asyncio.sleep(ms / 1000)

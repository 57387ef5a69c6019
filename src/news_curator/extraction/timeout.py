"""Timeout guard for individual network and automation steps."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from news_curator.extraction.errors import ExtractionTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(operation: Awaitable[T], budget_seconds: float, step: str = "operation") -> T:
    """Await ``operation`` within a wall-clock budget.

    Wraps the awaitable in asyncio.timeout(). On expiry the operation is
    cancelled (closing whatever request or session it holds) and
    ExtractionTimeout is raised. Cancellation of the calling task is not
    converted: it propagates as CancelledError.
    """
    try:
        async with asyncio.timeout(budget_seconds):
            return await operation
    except TimeoutError as exc:
        logger.warning("%s timed out after %.1fs", step, budget_seconds)
        raise ExtractionTimeout(f"{step} exceeded its {budget_seconds:.1f}s budget") from exc

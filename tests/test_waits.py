"""Tests for bounded waits."""

import asyncio

from popcorn.core.waits import WaitOutcome, wait_bounded


async def test_completed() -> None:
    """An operation that finishes in time completes."""
    assert await wait_bounded(asyncio.sleep(0), 1000) is WaitOutcome.COMPLETED


async def test_timed_out() -> None:
    """An operation still running at the bound times out instead of raising."""
    assert await wait_bounded(asyncio.sleep(5), 10) is WaitOutcome.TIMED_OUT


async def test_failed() -> None:
    """An operation that raises is reported as failed."""

    async def boom() -> None:
        raise RuntimeError("tab closed")

    assert await wait_bounded(boom(), 1000) is WaitOutcome.FAILED

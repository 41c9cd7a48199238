"""Bounded waits with an explicit three-way outcome."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

if TYPE_CHECKING:
    from collections.abc import Awaitable


class WaitOutcome(StrEnum):
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


async def wait_bounded(awaitable: Awaitable[Any], timeout_ms: int) -> WaitOutcome:
    """Await ``awaitable`` for at most ``timeout_ms``.

    Never raises for a timeout or a failure of the awaited operation; the
    operation is cancelled when the bound expires.
    """
    try:
        await asyncio.wait_for(awaitable, timeout=timeout_ms / 1000)
    except (TimeoutError, PlaywrightTimeoutError):
        return WaitOutcome.TIMED_OUT
    except Exception:  # noqa: BLE001
        return WaitOutcome.FAILED
    return WaitOutcome.COMPLETED


async def sleep_ms(ms: int) -> None:
    if ms > 0:
        await asyncio.sleep(ms / 1000)

"""Minimum spacing between screenshot captures."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .driver import TargetDriver


class ScreenshotThrottle:
    """Keeps consecutive captures at least ``interval_ms`` apart.

    One instance is owned by each run context, so the spacing applies within a
    run only: two runs, even back to back in one process, never delay each other.
    """

    def __init__(self, interval_ms: int = 1100) -> None:
        self.interval_ms = interval_ms
        self._last_capture: float | None = None

    async def wait(self) -> None:
        """Sleep until the interval since the last capture has elapsed, then claim the slot."""
        if self._last_capture is not None:
            remaining = self.interval_ms / 1000 - (time.monotonic() - self._last_capture)
            if remaining > 0:
                await asyncio.sleep(remaining)
        self._last_capture = time.monotonic()

    async def capture(self, driver: TargetDriver) -> str:
        """Capture a screenshot through ``driver`` once the throttle allows it."""
        await self.wait()
        return await driver.capture_screenshot()

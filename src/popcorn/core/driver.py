"""Control of the target page from outside its script context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import ScreenshotError
from .executor.agent import AGENT_SCRIPT
from .images import to_data_url
from .urls import urls_match
from .waits import WaitOutcome, wait_bounded

if TYPE_CHECKING:
    from playwright.async_api import Page


class TargetDriver(Protocol):
    async def navigate(self, url: str) -> None: ...

    async def go_back(self, timeout_ms: int = 5000) -> WaitOutcome: ...

    async def reload(self) -> WaitOutcome: ...

    async def capture_screenshot(self) -> str: ...

    async def inject_executor(self) -> None: ...

    async def focus_target(self) -> None: ...

    async def get_current_location(self) -> str: ...

    async def wait_for_load(self, timeout_ms: int) -> WaitOutcome: ...


class PlaywrightDriver:
    """Target driver backed by a Playwright page."""

    def __init__(self, page: Page, load_timeout_ms: int = 10000) -> None:
        self.page = page
        self.load_timeout_ms = load_timeout_ms

    async def navigate(self, url: str) -> None:
        """Go to ``url`` unless the page is already there, then wait for load."""
        if urls_match(self.page.url, url):
            return
        await self.page.goto(url, wait_until="commit")
        await self.wait_for_load(self.load_timeout_ms)

    async def go_back(self, timeout_ms: int = 5000) -> WaitOutcome:
        """History back. A load that never completes is not an error."""
        try:
            await self.page.go_back(wait_until="load", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return WaitOutcome.TIMED_OUT
        return WaitOutcome.COMPLETED

    async def reload(self) -> WaitOutcome:
        try:
            await self.page.reload(wait_until="load", timeout=self.load_timeout_ms)
        except PlaywrightTimeoutError:
            return WaitOutcome.TIMED_OUT
        return WaitOutcome.COMPLETED

    async def capture_screenshot(self) -> str:
        data = await self.page.screenshot(type="png")
        if not data:
            raise ScreenshotError("Screenshot capture returned no data")
        return to_data_url(data, "png")

    async def inject_executor(self) -> None:
        await self.page.evaluate(AGENT_SCRIPT)

    async def focus_target(self) -> None:
        await self.page.bring_to_front()

    async def get_current_location(self) -> str:
        return self.page.url

    async def wait_for_load(self, timeout_ms: int) -> WaitOutcome:
        return await wait_bounded(self.page.wait_for_load_state("load"), timeout_ms)

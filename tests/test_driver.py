"""Tests for the Playwright target driver."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from popcorn.core.driver import PlaywrightDriver
from popcorn.core.errors import ScreenshotError
from popcorn.core.urls import is_unscriptable, urls_match
from popcorn.core.waits import WaitOutcome


@pytest.fixture
def page() -> MagicMock:
    page = MagicMock()
    page.url = "http://app.test/"
    page.goto = AsyncMock()
    page.go_back = AsyncMock()
    page.screenshot = AsyncMock(return_value=b"\x89PNG")
    page.wait_for_load_state = AsyncMock()
    return page


async def test_navigate_skips_current_location(page) -> None:
    """Navigating to where the page already is does nothing."""
    await PlaywrightDriver(page).navigate("http://app.test")

    page.goto.assert_not_awaited()


async def test_navigate_goes_and_waits_for_load(page) -> None:
    await PlaywrightDriver(page).navigate("http://app.test/about")

    page.goto.assert_awaited_once_with("http://app.test/about", wait_until="commit")
    page.wait_for_load_state.assert_awaited_once_with("load")


async def test_go_back_timeout_is_not_an_error(page) -> None:
    page.go_back.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded")

    assert await PlaywrightDriver(page).go_back(5000) is WaitOutcome.TIMED_OUT


async def test_screenshot_is_a_png_data_url(page) -> None:
    assert (await PlaywrightDriver(page).capture_screenshot()).startswith("data:image/png;base64,")


async def test_empty_screenshot_raises(page) -> None:
    page.screenshot.return_value = b""

    with pytest.raises(ScreenshotError):
        await PlaywrightDriver(page).capture_screenshot()


def test_url_helpers() -> None:
    assert urls_match("http://app.test/", "http://app.test")
    assert not urls_match("http://app.test/a", "http://app.test/b")
    assert is_unscriptable("chrome-extension://abc/viewer.html")
    assert not is_unscriptable("https://app.test/")

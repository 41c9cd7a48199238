"""Launching the browser that hosts the target page."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from playwright.async_api import async_playwright

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from playwright.async_api import Page

    from .config.main import BrowserConfig


@asynccontextmanager
async def open_page(config: BrowserConfig) -> AsyncIterator[Page]:
    """Launch Chromium and yield a fresh page; the browser is closed on exit."""
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=config.headless)
        try:
            context = await browser.new_context(
                viewport={"width": config.viewport.width, "height": config.viewport.height},
            )
            context.set_default_timeout(config.timeout)
            yield await context.new_page()
        finally:
            await browser.close()

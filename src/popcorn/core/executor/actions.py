"""Playwright implementations of the individual actions."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..models import (
    NEEDS_BACKGROUND_SCREENSHOT,
    AssertStep,
    CheckActionabilityStep,
    CheckStep,
    ClickStep,
    DismissModalStep,
    DragStep,
    FillStep,
    GetPageStateStep,
    GoBackStep,
    HoverStep,
    KeypressStep,
    NavigateStep,
    ScreenshotStep,
    ScrollStep,
    SelectStep,
    UncheckStep,
    UploadStep,
    WaitStep,
)
from ..urls import urls_match

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

    from ..models import TestStep

DEFAULT_TIMEOUT_MS = 5000
DOM_QUIET_MS = 500


@dataclass
class ActionOutcome:
    passed: bool
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def locate(page: Page, selector: str, fallback: str | None = None) -> Locator:
    """Locator for ``selector``, also matching ``fallback`` when given."""
    locator = page.locator(selector)
    if fallback:
        locator = locator.or_(page.locator(fallback))
    return locator.first


async def agent_call(page: Page, method: str) -> Any:
    """Call a method of the in-page agent, or return None when it is gone."""
    try:
        return await page.evaluate(
            f"() => window.__popcornAgent ? window.__popcornAgent.{method}() : null"
        )
    except PlaywrightError:
        return None


async def run_action(
    page: Page, step: TestStep, default_timeout_ms: int = DEFAULT_TIMEOUT_MS, settle_ms: int = 300
) -> ActionOutcome:
    """Perform one action and describe what happened."""
    timeout = step.timeout or default_timeout_ms

    match step:
        case NavigateStep():
            await page.goto(step.target, timeout=timeout)
        case GoBackStep():
            await page.go_back(timeout=timeout)
        case ClickStep():
            return await click(page, step, timeout, settle_ms)
        case FillStep():
            await locate(page, step.selector, step.selector_fallback).fill(step.value, timeout=timeout)
        case SelectStep():
            await locate(page, step.selector, step.selector_fallback).select_option(step.value, timeout=timeout)
        case CheckStep():
            await locate(page, step.selector, step.selector_fallback).check(timeout=timeout)
        case UncheckStep():
            await locate(page, step.selector, step.selector_fallback).uncheck(timeout=timeout)
        case HoverStep():
            await locate(page, step.selector, step.selector_fallback).hover(timeout=timeout)
        case ScrollStep():
            await scroll(page, step, timeout)
        case WaitStep():
            return await wait(page, step, timeout)
        case AssertStep():
            return await check_assertion(page, step, timeout)
        case KeypressStep():
            if step.selector:
                await locate(page, step.selector, step.selector_fallback).press(step.key, timeout=timeout)
            else:
                await page.keyboard.press(step.key)
        case DragStep():
            source = locate(page, step.selector, step.selector_fallback)
            await source.drag_to(page.locator(step.target_selector).first, timeout=timeout)
        case UploadStep():
            await locate(page, step.selector, step.selector_fallback).set_input_files(step.file_path, timeout=timeout)
        case ScreenshotStep():
            # Pixels can only be captured from outside the page.
            return ActionOutcome(passed=True, metadata={NEEDS_BACKGROUND_SCREENSHOT: True})
        case CheckActionabilityStep():
            return await check_actionability(page, step)
        case GetPageStateStep():
            return ActionOutcome(passed=True, metadata={"url": page.url, "title": await page.title()})
        case DismissModalStep():
            return await dismiss_modal(page, step)
        case _:
            return ActionOutcome(passed=False, error=f"Unknown action: {step.action}")
    return ActionOutcome(passed=True)


async def click(page: Page, step: ClickStep, timeout: int, settle_ms: int) -> ActionOutcome:
    """Click and report whether the location changed or a dialog opened."""
    url_before = page.url
    await agent_call(page, "snapshotModals")
    await locate(page, step.selector, step.selector_fallback).click(timeout=timeout)
    await asyncio.sleep(settle_ms / 1000)

    url_changed = not urls_match(page.url, url_before)
    modal = await agent_call(page, "detectModal")
    return ActionOutcome(
        passed=True,
        metadata={"urlChanged": url_changed, "modalDetected": modal, "url": page.url},
    )


async def scroll(page: Page, step: ScrollStep, timeout: int) -> None:
    if step.selector:
        await locate(page, step.selector, step.selector_fallback).scroll_into_view_if_needed(timeout=timeout)
    elif step.position:
        await page.evaluate("([x, y]) => window.scrollTo(x, y)", [step.position.x, step.position.y])
    else:
        raise ValueError("Scroll action requires selector or position")
    await asyncio.sleep(0.1)


async def wait(page: Page, step: WaitStep, timeout: int) -> ActionOutcome:
    match step.condition:
        case "timeout":
            await asyncio.sleep((step.timeout or 1000) / 1000)
        case "visible" | "hidden" if step.selector:
            await page.locator(step.selector).first.wait_for(state=step.condition, timeout=timeout)
        case "networkIdle":
            await page.wait_for_load_state("networkidle", timeout=timeout)
        case "domStable":
            stable = await wait_for_dom_stable(page, timeout)
            return ActionOutcome(passed=True, metadata={"domStable": stable})
        case _:
            return ActionOutcome(passed=False, error=f"Unsupported wait condition: {step.condition}")
    return ActionOutcome(passed=True)


async def wait_for_dom_stable(page: Page, timeout: int) -> bool:
    """Wait until the DOM has been quiet for a while. Gives up silently at ``timeout``."""
    deadline = time.monotonic() + timeout / 1000
    while time.monotonic() < deadline:
        quiet_for = await agent_call(page, "msSinceMutation")
        if quiet_for is None or quiet_for >= DOM_QUIET_MS:
            return True
        await asyncio.sleep(0.1)
    return False


async def check_assertion(page: Page, step: AssertStep, timeout: int) -> ActionOutcome:
    expected = "" if step.expected is None else str(step.expected)
    selector = step.selector or ""

    try:
        match step.assertion_type:
            case "text":
                actual = (await locate(page, selector, step.selector_fallback).text_content(timeout=timeout) or "").strip()
                if expected in actual:
                    return ActionOutcome(passed=True, metadata={"actualText": actual})
                return ActionOutcome(
                    passed=False,
                    error=f'Expected text "{expected}" not found. Actual: "{actual}"',
                    metadata={"actualText": actual},
                )
            case "visible":
                try:
                    await locate(page, selector, step.selector_fallback).wait_for(state="visible", timeout=timeout)
                except PlaywrightTimeoutError:
                    return ActionOutcome(passed=False, error=f"Element is not visible: {selector}")
            case "hidden":
                if await page.locator(selector).first.is_visible():
                    return ActionOutcome(passed=False, error=f"Element is visible but should be hidden: {selector}")
            case "url":
                actual = page.url
                if expected not in actual:
                    return ActionOutcome(
                        passed=False,
                        error=f'Expected URL to contain "{expected}". Actual: "{actual}"',
                        metadata={"actualUrl": actual},
                    )
                return ActionOutcome(passed=True, metadata={"actualUrl": actual})
            case "count":
                actual_count = await page.locator(selector).count()
                expected_count = int(expected or 0)
                if actual_count != expected_count:
                    return ActionOutcome(
                        passed=False, error=f"Expected {expected_count} elements, found {actual_count}"
                    )
            case "attribute":
                name = step.name or ""
                value = await locate(page, selector, step.selector_fallback).get_attribute(name, timeout=timeout) or ""
                if expected not in value:
                    return ActionOutcome(
                        passed=False, error=f'Attribute "{name}" expected "{expected}", got "{value}"'
                    )
            case "value":
                value = await locate(page, selector, step.selector_fallback).input_value(timeout=timeout)
                if value != expected:
                    return ActionOutcome(passed=False, error=f'Expected value "{expected}", got "{value}"')
    except PlaywrightError as e:
        return ActionOutcome(passed=False, error=str(e))
    return ActionOutcome(passed=True)


async def check_actionability(page: Page, step: CheckActionabilityStep) -> ActionOutcome:
    locator = locate(page, step.selector, step.selector_fallback)
    if await locator.count() == 0:
        reason = "not found"
    elif not await locator.is_visible():
        reason = "hidden"
    elif not await locator.is_enabled():
        reason = "disabled"
    else:
        return ActionOutcome(passed=True, metadata={"actionable": True})
    return ActionOutcome(passed=True, metadata={"actionable": False, "reason": reason})


async def dismiss_modal(page: Page, step: DismissModalStep) -> ActionOutcome:
    """Close the open dialog via its close control, falling back to Escape."""
    open_before = await agent_call(page, "openModalCount") or 0
    if not open_before:
        return ActionOutcome(passed=True, metadata={"dismissed": False, "method": "none"})

    candidates = [s for s in (step.selector, await agent_call(page, "dismissSelector")) if s]
    for selector in candidates:
        button = page.locator(selector).first
        if await button.count() and await button.is_visible():
            await button.click(timeout=DEFAULT_TIMEOUT_MS)
            method = "click"
            break
    else:
        await page.keyboard.press("Escape")
        method = "escape"

    await asyncio.sleep(0.2)
    open_after = await agent_call(page, "openModalCount") or 0
    return ActionOutcome(passed=True, metadata={"dismissed": open_after < open_before, "method": method})

"""Tests for running a single round."""

from conftest import SCREENSHOT

from popcorn.core.demo import run_round
from popcorn.core.models import (
    NEEDS_BACKGROUND_SCREENSHOT,
    SCREENSHOT_DATA_URL,
    ClickStep,
    NavigateStep,
    ScreenshotStep,
    WaitStep,
)
from popcorn.core.rounds import Round


async def test_background_then_content(ctx, driver, executor) -> None:
    """Driver steps run first, then the content batch is dispatched once."""
    round_ = Round(
        background_steps=[NavigateStep(step_number=1, target="http://app.test/login")],
        content_steps=[ClickStep(step_number=2, selector="#go")],
    )

    outcome = await run_round(ctx, round_)

    assert outcome.ok
    assert [r.step_number for r in outcome.results] == [1, 2]
    assert all(r.passed for r in outcome.results)
    assert driver.calls[0] == ("navigate", "http://app.test/login")
    # navigation wiped the executor, so it was injected before dispatch
    assert ("inject",) in driver.calls
    assert len(executor.batches) == 1


async def test_round_without_content_skips_executor(ctx, driver, executor) -> None:
    """No executor ping or dispatch happens for a navigation-only round."""
    outcome = await run_round(ctx, Round(background_steps=[NavigateStep(step_number=1, target="http://app.test/a")]))

    assert outcome.ok
    assert executor.batches == []
    assert ("inject",) not in driver.calls


async def test_navigate_failure_is_recorded(ctx, driver) -> None:
    """A driver failure becomes a failed step, not an exception."""
    driver.navigate_error = RuntimeError("net::ERR_NAME_NOT_RESOLVED")

    outcome = await run_round(ctx, Round(background_steps=[NavigateStep(step_number=1, target="http://nope.test")]))

    assert outcome.ok
    assert outcome.results[0].passed is False
    assert "ERR_NAME_NOT_RESOLVED" in outcome.results[0].error


async def test_wait_background_step_is_a_delay(ctx) -> None:
    """A wait handed to the driver is just a timed pause."""
    outcome = await run_round(ctx, Round(background_steps=[WaitStep(step_number=1, timeout=5)]))

    assert outcome.results[0].passed


async def test_marked_screenshot_is_captured(ctx, driver) -> None:
    """Screenshots the executor could not take are captured and attached."""
    outcome = await run_round(ctx, Round(content_steps=[ClickStep(step_number=1, selector="#a"), ScreenshotStep(step_number=2)]))

    shot = outcome.results[1]
    assert shot.passed
    assert shot.screenshot_data_url == SCREENSHOT
    assert shot.metadata[SCREENSHOT_DATA_URL] == SCREENSHOT
    assert NEEDS_BACKGROUND_SCREENSHOT not in shot.metadata
    assert driver.calls.count(("screenshot",)) == 1


async def test_screenshot_failure_only_fails_that_step(ctx, driver) -> None:
    """A capture failure marks its own step failed and the round still completes."""
    driver.screenshot_error = RuntimeError("tab not visible")

    outcome = await run_round(
        ctx,
        Round(content_steps=[ScreenshotStep(step_number=1), ClickStep(step_number=2, selector="#a")]),
    )

    assert outcome.ok
    assert outcome.results[0].passed is False
    assert "tab not visible" in outcome.results[0].error
    assert outcome.results[1].passed


async def test_injection_failure_is_not_fatal(ctx, driver, executor) -> None:
    """Dispatch is still attempted; its failure is reported on the outcome."""
    executor.alive = False
    driver.inject_error = RuntimeError("Cannot access contents of the page")

    outcome = await run_round(ctx, Round(content_steps=[ClickStep(step_number=1, selector="#a")]))

    assert len(executor.batches) == 1
    assert not outcome.ok
    assert "Receiving end does not exist" in outcome.error

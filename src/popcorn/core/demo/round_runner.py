"""Execution of a single round against the live target."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console

from ..models import (
    NEEDS_BACKGROUND_SCREENSHOT,
    SCREENSHOT_DATA_URL,
    GoBackStep,
    NavigateStep,
    StepResult,
    WaitStep,
    make_step_result,
)
from ..waits import sleep_ms
from .link import dispatch_batch, ensure_executor

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..models import TestStep
    from ..rounds import Round
    from .context import DemoContext

console = Console()


@dataclass
class RoundOutcome:
    """Results of a round, plus the error that cut it short, if any."""

    results: list[StepResult] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def run_background_step(ctx: DemoContext, step: TestStep) -> StepResult:
    """Run a step through the driver. Failures become a failed result."""
    start = time.perf_counter()
    try:
        match step:
            case NavigateStep():
                await ctx.driver.navigate(step.target)
            case GoBackStep():
                await ctx.driver.go_back(ctx.settings.go_back_timeout_ms)
            case WaitStep():
                await sleep_ms(step.timeout or ctx.settings.default_wait_ms)
            case _:
                raise ValueError(f"{step.action} cannot run from the driver")
    except Exception as e:  # noqa: BLE001
        console.print(f"[yellow]Step {step.step_number} ({step.action}) failed: {e}[/yellow]")
        result = make_step_result(step.step_number, step.action, step.description, False, error=str(e))
    else:
        result = make_step_result(step.step_number, step.action, step.description, True)

    result.duration = int((time.perf_counter() - start) * 1000)
    return result


async def capture_marked_screenshots(ctx: DemoContext, results: Iterable[StepResult]) -> None:
    """Capture pixels for every result the executor could not screenshot itself."""
    for result in results:
        if not result.needs_background_screenshot:
            continue
        try:
            data_url = await ctx.capture_screenshot()
        except Exception as e:  # noqa: BLE001
            console.print(f"[yellow]Screenshot for step {result.step_number} failed: {e}[/yellow]")
            result.passed = False
            result.error = f"Screenshot capture failed: {e}"
        else:
            result.screenshot_data_url = data_url
            result.metadata[SCREENSHOT_DATA_URL] = data_url
        result.metadata.pop(NEEDS_BACKGROUND_SCREENSHOT, None)


async def run_round(ctx: DemoContext, round_: Round) -> RoundOutcome:
    """Driver steps first, then the executor batch, then pending screenshots."""
    outcome = RoundOutcome()
    for step in round_.background_steps:
        outcome.results.append(await run_background_step(ctx, step))

    if not round_.content_steps:
        return outcome

    await ensure_executor(ctx)
    console.print(f"[dim]Dispatching {len(round_.content_steps)} step(s) to the action executor[/dim]")
    try:
        content_results = await dispatch_batch(ctx, round_.content_steps)
    except Exception as e:  # noqa: BLE001
        outcome.error = str(e) or e.__class__.__name__
        return outcome

    await capture_marked_screenshots(ctx, content_results)
    outcome.results.extend(content_results)
    return outcome

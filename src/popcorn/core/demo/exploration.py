"""Autonomous exploration of a page's interactive elements.

For each target the engine checks that it can be clicked, clicks it,
screenshots the result, and brings the page back to where it was: closing a
dialog the click opened, or returning from a navigation it caused. A target
that blows up is reported as ``SKIPPED`` and the run moves on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console

from ..models import (
    SCREENSHOT_DATA_URL,
    CheckActionabilityStep,
    ClickStep,
    DemoResult,
    DismissModalStep,
    GetPageStateStep,
    ModalDescriptor,
    PlanOutline,
    ScreenshotCapture,
    StepOutline,
    StepResult,
    WaitStep,
    make_step_result,
    now_ms,
)
from ..urls import is_unscriptable, urls_match
from ..waits import WaitOutcome, sleep_ms
from .link import dispatch_batch, ensure_executor, send_single_action
from .persist import save_tape_and_reload
from .recording import abort_recording, finish_recording, start_recording

if TYPE_CHECKING:
    from ..models import ExplorationPlan, ExplorationTarget
    from .context import DemoContext, DemoDeps

console = Console()


@dataclass
class ElementOutcome:
    """What exploring one target produced. ``error`` is set when it was cut short."""

    results: list[StepResult] = field(default_factory=list)
    screenshots: list[ScreenshotCapture] = field(default_factory=list)
    next_step: int = 0
    error: str | None = None


async def _screenshot_step(ctx: DemoContext, outcome: ElementOutcome, label: str) -> None:
    """Capture a throttled screenshot and record it as a step of ``outcome``."""
    step = outcome.next_step
    outcome.next_step += 1
    try:
        data_url = await ctx.capture_screenshot()
    except Exception as e:  # noqa: BLE001
        outcome.results.append(make_step_result(step, "screenshot", label, False, error=str(e)))
        return

    outcome.screenshots.append(ScreenshotCapture(step_number=step, data_url=data_url, timestamp=now_ms(), label=label))
    result = make_step_result(step, "screenshot", label, True, metadata={SCREENSHOT_DATA_URL: data_url})
    result.screenshot_data_url = data_url
    outcome.results.append(result)


async def _recover_from_navigation(ctx: DemoContext, outcome: ElementOutcome, url_before: str) -> None:
    current = await ctx.driver.get_current_location()

    if is_unscriptable(current):
        # History back cannot be driven from these pages.
        await ctx.driver.navigate(url_before)
        outcome.results.append(make_step_result(outcome.next_step, "navigate", "Return from extension page", True))
        outcome.next_step += 1
        await ensure_executor(ctx, strict=True)
        return

    back = await ctx.driver.go_back(ctx.settings.go_back_timeout_ms)
    if back is WaitOutcome.TIMED_OUT:
        console.print("[dim]History back did not finish loading in time, continuing[/dim]")
    outcome.results.append(make_step_result(outcome.next_step, "go_back", "Return via browser back", True))
    outcome.next_step += 1
    await ensure_executor(ctx, strict=True)

    state = await send_single_action(
        ctx, GetPageStateStep(step_number=outcome.next_step, description="Verify page restored")
    )
    outcome.next_step += 1
    url_after = str(state.metadata.get("url") or "")
    if not urls_match(url_after, url_before):
        console.print(
            f"[yellow]History back landed on {url_after or '?'} instead of {url_before}, navigating directly[/yellow]"
        )
        await ctx.driver.navigate(url_before)
        outcome.results.append(
            make_step_result(outcome.next_step, "navigate", "Fallback navigate to original page", True)
        )
        outcome.next_step += 1

    await ensure_executor(ctx, strict=True)
    await send_single_action(
        ctx,
        WaitStep(
            step_number=outcome.next_step,
            description="Wait for page restore",
            condition="domStable",
            timeout=ctx.settings.dom_stable_timeout_ms,
        ),
    )
    outcome.next_step += 1


async def explore_element(ctx: DemoContext, target: ExplorationTarget, start_step: int) -> ElementOutcome:
    """Check, click, observe, capture and recover for a single target.

    Raises when the executor cannot be reached; :func:`explore_isolated`
    turns that into an outcome.
    """
    outcome = ElementOutcome(next_step=start_step)

    await ensure_executor(ctx, strict=True)

    check = await send_single_action(
        ctx,
        CheckActionabilityStep(
            step_number=outcome.next_step,
            description=f"Check {target.label} is actionable",
            selector=target.selector,
            selector_fallback=target.selector_fallback,
        ),
    )
    outcome.next_step += 1
    if not check.passed or check.metadata.get("actionable") is False:
        reason = check.metadata.get("reason") or "not actionable"
        console.print(f"[dim]Skipping {target.label!r}: {reason}[/dim]")
        outcome.results.append(
            make_step_result(check.step_number, "check_actionability", f"Skipped {target.label} ({reason})", True)
        )
        return outcome
    outcome.results.append(check)

    state_before = await send_single_action(
        ctx, GetPageStateStep(step_number=outcome.next_step, description="Record page state before click")
    )
    outcome.next_step += 1
    url_before = str(state_before.metadata.get("url") or "")

    clicked = await send_single_action(
        ctx,
        ClickStep(
            step_number=outcome.next_step,
            description=f"Click {target.label}",
            selector=target.selector,
            selector_fallback=target.selector_fallback,
        ),
    )
    outcome.results.append(clicked)
    outcome.next_step += 1
    if not clicked.passed:
        return outcome

    url_changed = bool(clicked.metadata.get("urlChanged"))
    raw_modal = clicked.metadata.get("modalDetected")
    modal = ModalDescriptor.model_validate(raw_modal) if raw_modal else None

    if url_changed and modal is None:
        # A client-side navigation never fires load, so a timeout is expected.
        await ctx.driver.wait_for_load(ctx.settings.navigation_timeout_ms)
        await ensure_executor(ctx, strict=True)

    await sleep_ms(ctx.settings.settle_delay_ms)
    await _screenshot_step(ctx, outcome, f"After clicking {target.label}")

    if modal is not None:
        try:
            await ensure_executor(ctx, strict=True)
            dismissed = await send_single_action(
                ctx,
                DismissModalStep(
                    step_number=outcome.next_step,
                    description="Dismiss modal dialog",
                    selector=modal.dismiss_selector,
                ),
            )
            if dismissed.passed and dismissed.metadata.get("dismissed"):
                outcome.results.append(dismissed)
            outcome.next_step += 1
        except Exception as e:  # noqa: BLE001
            console.print(f"[yellow]Modal dismissal failed: {e}[/yellow]")

    if url_changed:
        try:
            await _recover_from_navigation(ctx, outcome, url_before)
        except Exception as e:  # noqa: BLE001
            message = str(e) or e.__class__.__name__
            console.print(f"[yellow]Recovery after navigation failed: {message}[/yellow]")
            try:
                await ctx.driver.navigate(url_before)
            except Exception:  # noqa: BLE001
                outcome.results.append(
                    make_step_result(outcome.next_step, "navigate", f"Failed to return to page: {message}", False)
                )
            else:
                outcome.results.append(
                    make_step_result(outcome.next_step, "navigate", f"Return to page ({message})", True)
                )
            outcome.next_step += 1

    return outcome


async def explore_isolated(ctx: DemoContext, target: ExplorationTarget, start_step: int) -> ElementOutcome:
    """Explore ``target``; any exception becomes an outcome with ``error`` set."""
    try:
        return await explore_element(ctx, target, start_step)
    except Exception as e:  # noqa: BLE001
        return ElementOutcome(next_step=start_step, error=str(e) or e.__class__.__name__)


def _outline(plan: ExplorationPlan, results: list[StepResult]) -> PlanOutline:
    return PlanOutline(
        plan_name=f"exploration-{plan.mode}",
        description=f"{plan.mode} exploration of {plan.base_url}",
        base_url=plan.base_url,
        steps=[StepOutline(step_number=r.step_number, action=r.action, description=r.description) for r in results],
        tags=["exploration", plan.mode],
    )


async def run_exploration_demo(ctx: DemoContext, plan: ExplorationPlan, deps: DemoDeps) -> DemoResult:
    """Explore every target of ``plan`` and save the run as a tape. Never raises."""
    results: list[StepResult] = []
    screenshots: list[ScreenshotCapture] = []
    step = 1
    start_ms = now_ms()

    console.print(f"[bold blue]Exploring[/bold blue] {plan.base_url} ({len(plan.targets)} targets, {plan.mode})")
    await start_recording(ctx, deps)

    try:
        await ctx.driver.navigate(plan.base_url)
        results.append(make_step_result(step, "navigate", "Navigate to page", True))

        initial = ElementOutcome(next_step=step + 1)
        await _screenshot_step(ctx, initial, "Initial page state")
        results.extend(initial.results)
        screenshots.extend(initial.screenshots)
        step = initial.next_step

        if plan.form_fill_steps:
            await ensure_executor(ctx)
            try:
                results.extend(await dispatch_batch(ctx, plan.form_fill_steps))
            except Exception as e:  # noqa: BLE001
                console.print(f"[yellow]Form fill failed: {e}[/yellow]")
                results.append(make_step_result(step, "fill", "Form fill batch", False, error=str(e)))
                step += 1
            step = max([step, *(r.step_number + 1 for r in results)])

        for target in plan.targets:
            outcome = await explore_isolated(ctx, target, step)
            if outcome.error is not None:
                console.print(f"[yellow]Exploration of {target.label!r} failed: {outcome.error}[/yellow]")
                results.append(make_step_result(step, "click", f"SKIPPED: {target.label}", False, error=outcome.error))
                step += 1
                continue
            results.extend(outcome.results)
            screenshots.extend(outcome.screenshots)
            step = outcome.next_step

        try:
            if not urls_match(await ctx.driver.get_current_location(), plan.base_url):
                await ctx.driver.navigate(plan.base_url)
                await ensure_executor(ctx)
        except Exception as e:  # noqa: BLE001
            console.print(f"[dim]Could not restore {plan.base_url}: {e}[/dim]")

        final = ElementOutcome(next_step=step)
        await _screenshot_step(ctx, final, "Final state")
        results.extend(final.results)
        screenshots.extend(final.screenshots)
        step = final.next_step
    except Exception as e:  # noqa: BLE001
        message = str(e) or e.__class__.__name__
        console.print(f"[red]Exploration failed:[/red] {message}")
        results.append(make_step_result(step, "navigate", "Exploration failed", False, error=message))
        await abort_recording(ctx)

    artifact = await finish_recording(ctx, f"exploration-{plan.mode}-{now_ms()}")

    passed = all(r.passed for r in results)
    summary = (
        f"Explored {len(plan.targets)} elements successfully"
        if passed
        else f"Explored {len(plan.targets)} elements with some failures"
    )
    result = DemoResult(
        test_plan_id=f"exploration-{plan.mode}",
        passed=passed,
        steps=results,
        screenshots=screenshots,
        duration=now_ms() - start_ms,
        summary=summary,
        video_metadata=artifact.metadata if artifact else None,
    )

    thumbnail = screenshots[0].data_url if screenshots else None
    await save_tape_and_reload(ctx, deps, _outline(plan, results), result, artifact, thumbnail)
    return result

"""Running a fixed action plan end to end."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from ..acceptance import evaluate_all_criteria, parse_plain_text_criteria
from ..models import now_ms
from ..rounds import group_step_rounds
from ..waits import sleep_ms
from .persist import save_tape_and_reload
from .recording import abort_recording, finish_recording, start_recording
from .result import assemble_demo_result
from .round_runner import capture_marked_screenshots, run_round

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..models import DemoResult, StartDemoRequest, StepResult
    from .context import DemoContext, DemoDeps

console = Console()


async def capture_remaining_screenshots(ctx: DemoContext, steps: Sequence[StepResult]) -> None:
    """Capture screenshots still pending after all rounds ran."""
    pending = [s for s in steps if s.needs_background_screenshot]
    if not pending:
        return

    try:
        await ctx.driver.focus_target()
    except Exception as e:  # noqa: BLE001
        console.print(f"[dim]Could not focus target before capture: {e}[/dim]")
    await sleep_ms(ctx.settings.focus_delay_ms)
    await capture_marked_screenshots(ctx, pending)


def _attach_criteria(result: DemoResult, criteria: Sequence[str]) -> None:
    if not criteria:
        return
    _, result.criteria_results = evaluate_all_criteria(result.steps, parse_plain_text_criteria("\n".join(criteria)))


async def _finish_with_error(
    ctx: DemoContext,
    deps: DemoDeps,
    request: StartDemoRequest,
    steps: list[StepResult],
    start_ms: int,
    error: str,
) -> DemoResult:
    console.print(f"[red]Demo {request.test_plan_id} aborted:[/red] {error}")
    await abort_recording(ctx)
    result = assemble_demo_result(request.test_plan_id, steps, start_ms, error=error)
    _attach_criteria(result, request.acceptance_criteria)
    await save_tape_and_reload(ctx, deps, request.test_plan, result)
    return result


async def run_full_demo(ctx: DemoContext, request: StartDemoRequest, deps: DemoDeps) -> DemoResult:
    """Run every round of the plan, record it, and save the tape.

    Never raises: a run that cannot continue still yields a result built from
    the steps that did run.
    """
    plan = request.test_plan
    start_ms = now_ms()
    steps: list[StepResult] = []

    console.print(f"[bold blue]Running demo[/bold blue] {request.test_plan_id} ({len(plan.steps)} steps)")
    await start_recording(ctx, deps)

    try:
        for round_ in group_step_rounds(plan.steps):
            outcome = await run_round(ctx, round_)
            steps.extend(outcome.results)
            if not outcome.ok:
                return await _finish_with_error(ctx, deps, request, steps, start_ms, outcome.error or "Round failed")
        await capture_remaining_screenshots(ctx, steps)
    except Exception as e:  # noqa: BLE001
        return await _finish_with_error(ctx, deps, request, steps, start_ms, str(e) or e.__class__.__name__)

    artifact = await finish_recording(ctx, f"demo-{request.test_plan_id}-{now_ms()}")
    result = assemble_demo_result(
        request.test_plan_id,
        steps,
        start_ms,
        video_metadata=artifact.metadata if artifact else None,
    )
    _attach_criteria(result, request.acceptance_criteria)

    await save_tape_and_reload(ctx, deps, plan, result, artifact)
    return result

"""Saving a finished run as a tape."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from ..models import Resolution
from ..tape_name import generate_tape_name
from ..tape_store import TapeRecord

if TYPE_CHECKING:
    from ..models import DemoResult, PlanOutline, TestPlan
    from ..recorder import RecordingArtifact
    from .context import DemoContext, DemoDeps

console = Console()


async def capture_thumbnail(ctx: DemoContext) -> str | None:
    try:
        await ctx.driver.focus_target()
        return await ctx.capture_screenshot()
    except Exception as e:  # noqa: BLE001
        console.print(f"[dim]No thumbnail captured: {e}[/dim]")
        return None


def build_tape_record(
    plan: TestPlan | PlanOutline,
    result: DemoResult,
    artifact: RecordingArtifact | None,
    thumbnail_data_url: str | None,
) -> TapeRecord:
    metadata = artifact.metadata if artifact else None
    return TapeRecord(
        demo_name=generate_tape_name(plan),
        test_plan_id=result.test_plan_id,
        duration=result.duration,
        file_size=metadata.file_size if metadata else 0,
        resolution=metadata.resolution if metadata else Resolution(),
        status="complete" if result.passed else "error",
        passed=result.passed,
        summary=result.summary,
        results=result,
        test_plan=plan,
        video_artifact=artifact.data if artifact else None,
        thumbnail_data_url=thumbnail_data_url,
    )


async def save_tape_and_reload(
    ctx: DemoContext,
    deps: DemoDeps,
    plan: TestPlan | PlanOutline,
    result: DemoResult,
    artifact: RecordingArtifact | None = None,
    thumbnail_data_url: str | None = None,
) -> str | None:
    """Persist the run, then reload the target for the next run.

    Neither a failed save nor a failed reload changes ``result``.
    """
    tape_id = None
    if deps.tape_store is not None:
        thumbnail = thumbnail_data_url or await capture_thumbnail(ctx)
        record = build_tape_record(plan, result, artifact, thumbnail)
        try:
            deps.tape_store.init()
            tape_id = deps.tape_store.save(record)
            console.print(f"[green]Tape saved:[/green] {record.demo_name} ({tape_id})")
            if deps.on_tape_saved is not None:
                deps.on_tape_saved(tape_id)
        except Exception as e:  # noqa: BLE001
            console.print(f"[yellow]Failed to save tape: {e}[/yellow]")

    if ctx.settings.reload_after_run:
        try:
            await ctx.driver.reload()
        except Exception as e:  # noqa: BLE001
            console.print(f"[yellow]Failed to reload target: {e}[/yellow]")

    return tape_id

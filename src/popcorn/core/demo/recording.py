"""Best-effort handling of the recording session around a run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from ..errors import PopcornError
from ..recorder import RecordingState

if TYPE_CHECKING:
    from ..recorder import RecordingArtifact
    from .context import DemoContext, DemoDeps

console = Console()

VIDEO_EXTENSION = "webp"


async def start_recording(ctx: DemoContext, deps: DemoDeps) -> bool:
    """Start recording if allowed. A failure only means the run has no video."""
    if ctx.recorder is None or deps.skip_recording:
        console.print("[dim]Recording skipped for this run[/dim]")
        return False

    try:
        await ctx.recorder.start(ctx.recording_target)
    except PopcornError as e:
        console.print(f"[yellow]Recording unavailable, continuing without video: {e}[/yellow]")
        await ctx.recorder.reset()
        return False

    console.print("[dim]Recording started[/dim]")
    return True


async def finish_recording(ctx: DemoContext, filename_stem: str) -> RecordingArtifact | None:
    """Stop the recording and return the artifact, or None when there is nothing worth keeping."""
    recorder = ctx.recorder
    if recorder is None or recorder.state is not RecordingState.RECORDING:
        return None

    try:
        artifact = await recorder.stop()
    except PopcornError as e:
        console.print(f"[yellow]Failed to stop recording: {e}[/yellow]")
        return None
    finally:
        await recorder.reset()

    if artifact.size == 0:
        console.print("[yellow]Recording captured 0 bytes, discarding[/yellow]")
        return None

    artifact.metadata.filename = f"{filename_stem}.{VIDEO_EXTENSION}"
    console.print(f"[dim]Recording stopped, {artifact.size} bytes captured[/dim]")
    return artifact


async def abort_recording(ctx: DemoContext) -> None:
    """Stop and discard any recording in progress."""
    recorder = ctx.recorder
    if recorder is None or recorder.state is RecordingState.IDLE:
        return
    if recorder.state is RecordingState.RECORDING:
        try:
            await recorder.stop()
        except PopcornError as e:
            console.print(f"[dim]Discarding recording: {e}[/dim]")
    await recorder.reset()

"""Helpers shared by the CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.table import Table

from popcorn.core.config.main import PopcornConfig
from popcorn.core.errors import PopcornError
from popcorn.core.plans import load_plan_file

if TYPE_CHECKING:
    from pathlib import Path

    from pydantic import BaseModel

    from popcorn.core.models import DemoResult

console = Console()


def load_config_or_exit() -> PopcornConfig:
    try:
        return PopcornConfig.load_config_or_default()
    except PopcornError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Run [bold]popcorn init[/bold] to create a configuration file.")
        raise typer.Exit(-1) from e


def load_plan_or_exit[M: BaseModel](path: Path, model: type[M]) -> M:
    try:
        return load_plan_file(path, model)
    except PopcornError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(-1) from e


def apply_overrides(config: PopcornConfig, headless: bool | None, no_video: bool) -> None:
    if headless is not None:
        config.browser.headless = headless
    if no_video:
        config.demo.record_video = False


def print_demo_result(result: DemoResult, verbose: bool = False) -> None:
    """Render a run as a table of steps followed by the summary."""
    table = Table(title=result.test_plan_id, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Action")
    table.add_column("Description")
    table.add_column("Result")
    table.add_column("ms", justify="right", style="dim")

    for step in result.steps:
        status = "[green]pass[/green]" if step.passed else f"[red]fail[/red] {step.error or ''}"
        table.add_row(str(step.step_number), step.action, step.description, status, str(step.duration))

    if verbose or not result.passed:
        console.print(table)

    if result.criteria_results:
        for criterion in result.criteria_results:
            mark = "[green]✓[/green]" if criterion.passed else "[red]✗[/red]"
            console.print(f"  {mark} {criterion.message}")

    color = "green" if result.passed else "red"
    console.print(f"[{color}]{result.summary}[/{color}]")
    if result.video_metadata is not None:
        console.print(f"[dim]Video: {result.video_metadata.filename} ({result.video_metadata.file_size} bytes)[/dim]")

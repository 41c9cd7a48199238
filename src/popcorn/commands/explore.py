"""Explore command: click through a page's interactive elements."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from popcorn.core.browser import open_page
from popcorn.core.demo import DemoContext, DemoDeps, run_exploration_demo
from popcorn.core.models import ExplorationPlan
from popcorn.core.tape_store import TapeStore

from .common import apply_overrides, load_config_or_exit, load_plan_or_exit, print_demo_result

if TYPE_CHECKING:
    from popcorn.core.config.main import PopcornConfig
    from popcorn.core.models import DemoResult

console = Console()


async def _explore(config: PopcornConfig, plan: ExplorationPlan) -> DemoResult:
    async with open_page(config.browser) as page:
        ctx = DemoContext.for_page(page, config.demo)
        deps = DemoDeps(tape_store=TapeStore(config.tapes_path))
        return await run_exploration_demo(ctx, plan, deps)


def explore_command(
    plan_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Exploration plan (JSON or YAML)"),
    exhaustive: bool = typer.Option(False, "--exhaustive", help="Mark the run as an exhaustive exploration"),
    headless: bool | None = typer.Option(None, "--headless/--headed", help="Override browser.headless"),
    no_video: bool = typer.Option(False, "--no-video", help="Do not record the run"),
) -> None:
    """Explore the targets listed in a plan and save the result as a tape."""
    config = load_config_or_exit()
    apply_overrides(config, headless, no_video)
    plan = load_plan_or_exit(plan_file, ExplorationPlan)
    if exhaustive:
        plan = plan.model_copy(update={"mode": "exhaustive"})

    if not plan.targets:
        console.print("[yellow]The plan lists no targets; only the page itself will be captured.[/yellow]")

    result = asyncio.run(_explore(config, plan))
    print_demo_result(result, verbose=config.verbose)
    if not result.passed:
        raise typer.Exit(1)

"""Run command: play a test plan against the live application."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from popcorn.core.browser import open_page
from popcorn.core.demo import DemoContext, DemoDeps, run_full_demo
from popcorn.core.models import NAVIGATION_ACTIONS, DemoResult, StartDemoRequest, TestPlan
from popcorn.core.tape_store import TapeStore

from .common import apply_overrides, load_config_or_exit, load_plan_or_exit, print_demo_result

if TYPE_CHECKING:
    from popcorn.core.config.main import PopcornConfig

console = Console()


async def _run(config: PopcornConfig, request: StartDemoRequest) -> DemoResult:
    plan = request.test_plan
    async with open_page(config.browser) as page:
        if not plan.steps or plan.steps[0].action not in NAVIGATION_ACTIONS:
            await page.goto(plan.base_url)
        ctx = DemoContext.for_page(page, config.demo)
        deps = DemoDeps(tape_store=TapeStore(config.tapes_path))
        return await run_full_demo(ctx, request, deps)


def run_command(
    plan_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Test plan (JSON or YAML)"),
    criterion: list[str] = typer.Option([], "--criterion", "-c", help="Acceptance criterion, may be repeated"),
    headless: bool | None = typer.Option(None, "--headless/--headed", help="Override browser.headless"),
    no_video: bool = typer.Option(False, "--no-video", help="Do not record the run"),
) -> None:
    """Run a test plan and save the result as a tape."""
    config = load_config_or_exit()
    apply_overrides(config, headless, no_video)
    plan = load_plan_or_exit(plan_file, TestPlan)

    request = StartDemoRequest(test_plan_id=plan_file.stem, test_plan=plan, acceptance_criteria=criterion)
    result = asyncio.run(_run(config, request))

    print_demo_result(result, verbose=config.verbose)
    if not result.passed:
        raise typer.Exit(1)

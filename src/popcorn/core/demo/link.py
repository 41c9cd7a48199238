"""Talking to the action executor from the engine side."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from ..errors import ExecutorUnavailableError, NoExecutorResultError
from ..executor.messages import ExecutePlanRequest
from ..waits import sleep_ms

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..models import StepResult, TestStep
    from .context import DemoContext

console = Console()


async def executor_alive(ctx: DemoContext) -> bool:
    try:
        return await ctx.executor.ping() is not None
    except Exception:  # noqa: BLE001
        return False


async def ensure_executor(ctx: DemoContext, *, strict: bool = False) -> None:
    """Make sure the executor answers, injecting it when it does not.

    With ``strict`` an injection failure propagates; otherwise it is logged and
    the next dispatch reports the problem.
    """
    if await executor_alive(ctx):
        return

    try:
        await ctx.driver.inject_executor()
    except Exception as e:
        if strict:
            raise
        console.print(f"[yellow]Failed to inject action executor: {e}[/yellow]")
        return

    await sleep_ms(ctx.settings.executor_init_delay_ms)


async def dispatch_batch(ctx: DemoContext, steps: Sequence[TestStep]) -> list[StepResult]:
    reply = await ctx.executor.execute_plan(ExecutePlanRequest(steps=list(steps)))
    if reply is None:
        raise ExecutorUnavailableError("No response from action executor")
    return reply.results


async def send_single_action(ctx: DemoContext, step: TestStep) -> StepResult:
    results = await dispatch_batch(ctx, [step])
    if not results:
        raise NoExecutorResultError(f"No result received for {step.action}")
    return results[0]

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError
from rich.console import Console

from ..errors import ExecutorUnavailableError
from ..models import StepResult, now_ms
from .actions import DEFAULT_TIMEOUT_MS, ActionOutcome, run_action
from .agent import PING_SCRIPT
from .messages import ExecutePlanReply, PingReply

if TYPE_CHECKING:
    from playwright.async_api import Page

    from ..models import TestStep
    from .messages import ExecutePlanRequest

console = Console()


class PlaywrightActionExecutor:
    """Action executor that drives the page through Playwright.

    It only answers while the in-page agent is installed, so a full
    navigation makes it unreachable until the agent is injected again.
    """

    def __init__(self, page: Page, action_timeout_ms: int = DEFAULT_TIMEOUT_MS, settle_ms: int = 300) -> None:
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self.settle_ms = settle_ms

    async def ping(self) -> PingReply | None:
        try:
            alive = await self.page.evaluate(PING_SCRIPT)
        except PlaywrightError:
            return None
        return PingReply() if alive else None

    async def execute_plan(self, request: ExecutePlanRequest) -> ExecutePlanReply:
        """Run the batch in order.

        A failed step stops the batch, except for failed assertions, which are
        recorded and skipped over.
        """
        if await self.ping() is None:
            raise ExecutorUnavailableError("Could not establish connection. Receiving end does not exist.")

        results: list[StepResult] = []
        for step in request.steps:
            result = await self.execute_step(step)
            results.append(result)
            if not result.passed and step.action != "assert":
                console.print(f"[dim]Stopping batch after failed step {step.step_number} ({step.action})[/dim]")
                break

        return ExecutePlanReply(success=all(r.passed for r in results), results=results)

    async def execute_step(self, step: TestStep) -> StepResult:
        start = time.perf_counter()
        try:
            outcome = await run_action(self.page, step, self.action_timeout_ms, self.settle_ms)
        except Exception as e:  # noqa: BLE001
            outcome = ActionOutcome(passed=False, error=str(e) or e.__class__.__name__)

        return StepResult(
            step_number=step.step_number,
            action=step.action,
            description=step.description,
            passed=outcome.passed,
            duration=int((time.perf_counter() - start) * 1000),
            timestamp=now_ms(),
            error=outcome.error,
            metadata=outcome.metadata,
        )

"""In-page action executor: protocol and Playwright adapter."""

from __future__ import annotations

from typing import Protocol

from .messages import ExecutePlanReply, ExecutePlanRequest, PingReply
from .playwright import PlaywrightActionExecutor


class ActionExecutor(Protocol):
    """Performs fine-grained actions inside the target and reports outcomes."""

    async def ping(self) -> PingReply | None: ...

    async def execute_plan(self, request: ExecutePlanRequest) -> ExecutePlanReply | None: ...


__all__ = [
    "ActionExecutor",
    "ExecutePlanReply",
    "ExecutePlanRequest",
    "PingReply",
    "PlaywrightActionExecutor",
]

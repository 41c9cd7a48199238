"""Messages exchanged with the action executor."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from ..models import StepResult, TestStep, WireModel


class PingReply(WireModel):
    pong: bool = True


class ExecutePlanRequest(WireModel):
    kind: Literal["execute_plan"] = "execute_plan"
    steps: list[TestStep]


class ExecutePlanReply(WireModel):
    success: bool
    results: list[StepResult] = Field(default_factory=list)
    error: str | None = None

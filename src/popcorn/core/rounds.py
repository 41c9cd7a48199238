"""Partitioning of a flat action plan into execution rounds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .models import GoBackStep, NavigateStep, ScreenshotStep

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import TestStep


@dataclass
class Round:
    """Driver-level steps followed by one executor batch."""

    background_steps: list[TestStep] = field(default_factory=list)
    content_steps: list[TestStep] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.background_steps or self.content_steps)


def group_step_rounds(steps: Sequence[TestStep]) -> list[Round]:
    """Split ``steps`` into rounds.

    Navigation wipes the in-page executor, so ``navigate`` and ``go_back`` run
    from the driver and start a new round when executor work is pending. A
    ``screenshot`` closes the current round so the capture happens before any
    later action can change the page.
    """
    rounds: list[Round] = []
    current = Round()

    for step in steps:
        match step:
            case NavigateStep() | GoBackStep():
                if current.content_steps:
                    rounds.append(current)
                    current = Round()
                current.background_steps.append(step)
            case ScreenshotStep():
                current.content_steps.append(step)
                rounds.append(current)
                current = Round()
            case _:
                current.content_steps.append(step)

    if current:
        rounds.append(current)
    return rounds
